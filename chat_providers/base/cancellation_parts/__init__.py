"""Cancellation implementation parts (see ``chat_providers.base.cancellation``)."""
