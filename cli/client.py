"""Main CLI client with REPL loop."""

import os

from .api_client import ThoughtSortClient
from .commands import (
    add_response,
    create_note,
    delete_chat,
    delete_note,
    edit_note,
    list_chats,
    list_notes,
    login_user,
    logout_user,
    new_chat,
    register_user,
    rename_note,
    select_note,
    send_message,
    summarize_note,
    switch_chat,
    view_history,
    view_note,
)
from .config import API_URL, delete_token, load_token
from .dashboard import Dashboard
from .store import selected_note

HELP = """
Auth Commands:
  /register - Create a new user account
  /login - Login to an existing account
  /logout - Logout

Note Commands:
  /notes [search] - List your notes, optionally filtered
  /note - Create a new note
  /select [number] - Select a note to chat about (no number clears it)
  /view - Show the selected note
  /edit - Edit the selected note in your editor
  /rename <title> - Rename the selected note
  /summary - Regenerate the selected note's summary
  /add - Append the last assistant response to the selected note
  /delete - Delete the selected note

Chat Commands:
  /chats - List your chats
  /new [title] - Start a new chat
  /switch [number] - Switch chat (no number starts fresh)
  /history - Show the active chat
  /delchat - Delete the active chat

Utility Commands:
  /help - Show this help
  /clear - Clear the terminal screen

Anything else is a message. With a note selected it is a question about
that note. Otherwise, mentioning "create" or "note" saves it as a new note,
and anything else goes to the assistant.
Type 'exit' or 'quit' to end the conversation."""

# Commands that take the rest of the line as an argument.
ARG_COMMANDS = {
    "/notes": list_notes,
    "/select": select_note,
    "/rename": rename_note,
    "/new": new_chat,
    "/switch": switch_chat,
}

COMMANDS = {
    "/register": register_user,
    "/login": login_user,
    "/logout": logout_user,
    "/note": create_note,
    "/view": view_note,
    "/edit": edit_note,
    "/summary": summarize_note,
    "/add": add_response,
    "/delete": delete_note,
    "/chats": list_chats,
    "/history": view_history,
    "/delchat": delete_chat,
}

PUBLIC_COMMANDS = {"/register", "/login", "/logout"}


def _print_notification(level: str, message: str):
    prefix = "✓" if level == "success" else "Error:"
    print(f"{prefix} {message}")


def _prompt(dashboard: Dashboard) -> str:
    note = selected_note(dashboard.state)
    return f"You [{note['title'][:30]}]: " if note else "You: "


def main():
    """CLI client for the Thought Sort API."""
    print("Welcome to Thought Sort!")
    print(HELP)
    print(f"Note: Make sure the API server is running at {API_URL} (python -m api.server)\n")

    token = load_token()
    client = ThoughtSortClient(token=token)

    def forget_token():
        delete_token()
        client.token = None

    dashboard = Dashboard(client, notify=_print_notification, on_unauthorized=forget_token)

    if token:
        print("✓ You are already logged in.\n")
        dashboard.load()
    else:
        print("⚠ You are not logged in. Please /register or /login.\n")

    with client:
        while True:
            try:
                user_input = input(_prompt(dashboard)).strip()

                if user_input.lower() in ["exit", "quit"]:
                    print("\nGoodbye!")
                    break

                if not user_input:
                    continue

                command, _, argument = user_input.partition(" ")
                command = command.lower()

                if command == "/help":
                    print(HELP + "\n")
                    continue

                if command == "/clear":
                    os.system("cls" if os.name == "nt" else "clear")
                    continue

                if command not in PUBLIC_COMMANDS and not client.token:
                    print("Error: You must be logged in. Use /register or /login.\n")
                    continue

                if command in ARG_COMMANDS:
                    ARG_COMMANDS[command](dashboard, argument)
                elif command in COMMANDS:
                    COMMANDS[command](dashboard)
                elif command.startswith("/"):
                    print(f"Unknown command: {command}. Type /help for the list.\n")
                else:
                    send_message(dashboard, user_input)

            except KeyboardInterrupt:
                print("\n\nGoodbye!")
                break
            except EOFError:
                print("\n\nGoodbye!")
                break
