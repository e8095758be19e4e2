"""Core domain package for chatmonitor.

Core contains pattern matching, the rule index, action resolution and the
word manager without any Telegram or file-format specific code, keeping the
matching logic portable across hosts.
"""
