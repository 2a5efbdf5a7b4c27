"""Storefront: shopper-side cart, checkout and order tracking."""
