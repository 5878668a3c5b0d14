"""Conversation state: conversations, requests, responses and change sets."""
