"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt)
  • Signed token creation & verification
  • Account id generation
  • Discord identity reconciliation (find-or-create)
  • Native signup / login, profile details, avatar upload
  • ``get_current_user_id`` FastAPI dependency
"""
