"""Training Calendar - OTP-gated registration and training reminders."""
