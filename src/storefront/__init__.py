"""
Storefront services: cart, checkout wizard, mock order history, reviews and
the newsletter popup policy.
"""
