"""Student portal backend: OTP login, admin back-office and learning content."""

__version__ = "1.0.0"
