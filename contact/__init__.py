"""
Contact App

Relays purchase offers submitted through the domain sale page:
- Public offer submission endpoint
- Cloudflare Turnstile spam protection
- Owner notification and sender confirmation emails
- Ordered fallback across transactional email providers
"""
