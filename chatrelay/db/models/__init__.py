# chatrelay/db/models/__init__.py
from .message import Message, SenderRole
from .push_registration import PushRegistration
