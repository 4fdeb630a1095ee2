# src/messaging/domain/__init__.py
