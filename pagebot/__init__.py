"""PageBot - webhook chatbot adapter for Messenger pages and Telegram."""
__version__ = "0.1.0"
