"""Chat command handlers."""

from ..dashboard import Dashboard, Route
from ..render import render_chat, render_chat_list
from ..store import selected_chat
from .notes import resolve_ref


def list_chats(dashboard: Dashboard):
    """List all chats, most recently active first."""
    if not dashboard.refresh_chats():
        return
    print("\n=== Your Chats ===")
    print(render_chat_list(list(dashboard.state.chats), dashboard.state.selected_chat_id))
    print()


def new_chat(dashboard: Dashboard, title: str):
    """Start a new chat, about the selected note if there is one."""
    title = title.strip() or input("Chat title: ").strip()
    if not title:
        print("Error: Title is required.\n")
        return

    chat = dashboard.new_chat(title)
    if chat is not None:
        about = f" about '{chat['note']['title']}'" if chat.get("note") else ""
        print(f"\n✓ Chat created{about}. This is now your active chat.\n")


def switch_chat(dashboard: Dashboard, ref: str):
    """Switch to another chat by list number or id."""
    if not ref.strip():
        dashboard.select_chat(None)
        print("\nNo active chat. Your next message starts a new one.\n")
        return

    chat = resolve_ref(list(dashboard.state.chats), ref)
    if chat is None:
        print(f"Error: Chat '{ref.strip()}' not found. Use /chats to list them.\n")
        return

    dashboard.select_chat(chat["id"])
    print(f"\n✓ Switched to chat: {chat['title']}\n")


def view_history(dashboard: Dashboard):
    """Show the active chat's transcript."""
    chat = selected_chat(dashboard.state)
    if chat is None:
        print("No active chat. Use /chats and /switch, or just send a message.\n")
        return
    print()
    print(render_chat(chat))
    print()


def delete_chat(dashboard: Dashboard):
    """Delete the active chat and its messages."""
    chat = selected_chat(dashboard.state)
    if chat is None:
        print("Error: No active chat.\n")
        return

    confirm = input(f"Are you sure you want to delete chat '{chat['title']}'? (y/N): ")
    if confirm.strip().lower() not in ["y", "yes"]:
        print("\nDeletion cancelled.\n")
        return

    if dashboard.delete_chat(chat["id"]):
        print("\n✓ Chat deleted.\n")


def send_message(dashboard: Dashboard, text: str):
    """Send a free-form message and print what came of it."""
    result = dashboard.send_message(text)
    if result is None:
        return

    if result.route == Route.CREATE_NOTE:
        print(f"Created note: {result.note['title']}\n")
        return

    print(f"Assistant: {result.response}\n")
    if result.route == Route.NOTE_CHAT:
        print("  (Use /add to append this response to the note.)\n")
