"""
Listing App

Public data for the domain sale page: asking price, payment options,
spam protection site key, and the sitemap of localized pages.
"""
