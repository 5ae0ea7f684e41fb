"""Minimal demonstration of a chat conversation."""

import asyncio

from chat_core.api.service import ask, create_conversation

if __name__ == "__main__":
    question = "Please explain what a context manager is in two sentences."
    conversation = create_conversation(name="demo")
    reply = asyncio.run(ask(conversation, question))
    print("User:", question)
    print("Assistant:", reply["reply"])
