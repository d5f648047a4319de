"""
BBM Email Package.

Modules:
- client: EmailClient for handing email requests to the Communications Service

Templates and delivery live in the Communications Service. This package only
hands off the request (recipient, subject, template id, data, metadata).
"""
