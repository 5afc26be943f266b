"""
Transactional email package.

Modules:
- core: SMTP send_email and the shared HTML layout
- dispatch: fire-and-forget scheduling on BackgroundTasks
- accounts: verification links and login one-time codes
- orders: booking confirmation, status, delivery OTP and COD emails
"""
