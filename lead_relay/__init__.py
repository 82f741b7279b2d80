"""Web form relay forwarding contact submissions to Zoho CRM and Brevo."""

__version__ = "0.1.0"
