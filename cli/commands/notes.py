"""Note command handlers."""

import os
import subprocess
import sys
import tempfile
from pathlib import Path

from ..dashboard import Dashboard
from ..render import render_note, render_note_list
from ..store import ViewMode, filtered_notes, selected_note


def resolve_ref(records: list[dict], ref: str) -> dict | None:
    """Find a record by its 1-based list position or by id."""
    ref = ref.strip()
    if ref.isdigit():
        index = int(ref) - 1
        if 0 <= index < len(records):
            return records[index]
        return None
    return next((record for record in records if record["id"] == ref), None)


def list_notes(dashboard: Dashboard, search: str = ""):
    """List notes, optionally filtered by a search term."""
    dashboard.set_view_mode(ViewMode.NOTES)
    dashboard.search(search.strip())
    if not dashboard.refresh_notes():
        return

    notes = filtered_notes(dashboard.state)
    heading = f"Notes matching '{dashboard.state.search_term}'" if search.strip() else "Your Notes"
    print(f"\n=== {heading} ===")
    print(render_note_list(notes, dashboard.state.selected_note_id))
    print()


def select_note(dashboard: Dashboard, ref: str):
    """Select a note so that chat messages are about it. No argument clears it."""
    if not ref.strip():
        dashboard.select_note(None)
        print("\nNote selection cleared. Messages now go to general chat.\n")
        return

    note = resolve_ref(filtered_notes(dashboard.state), ref)
    if note is None:
        print(f"Error: Note '{ref.strip()}' not found. Use /notes to list them.\n")
        return

    dashboard.select_note(note["id"])
    print(f"\n✓ Selected note: {note['title']}")
    print("  Messages are now about this note. Use /select with no argument to clear.\n")


def view_note(dashboard: Dashboard):
    """Show the selected note in full."""
    note = selected_note(dashboard.state)
    if note is None:
        print("Error: No note selected. Use /select <number>.\n")
        return
    print()
    print(render_note(note))
    print()


def create_note(dashboard: Dashboard):
    """Create a new note with a title and multi-line content."""
    print("\n=== Create New Note ===")
    title = input("Title: ").strip()
    if not title:
        print("Error: Title is required.\n")
        return

    print("Content (finish with a line containing only '.'):")
    lines = []
    while True:
        line = input()
        if line.strip() == ".":
            break
        lines.append(line)

    content = "\n".join(lines).strip()
    if not content:
        print("Error: Content is required.\n")
        return

    print("\nGenerating summary and icon...")
    note = dashboard.create_note(title, content)
    if note is not None:
        print()
        print(render_note(note))
        print()


def _get_editor():
    """Get the user's preferred text editor."""
    editor = os.environ.get("EDITOR") or os.environ.get("VISUAL")
    if editor:
        return editor

    if sys.platform == "win32":
        return "notepad"
    for editor_cmd in ["nano", "vim", "vi"]:
        try:
            subprocess.run(
                ["which", editor_cmd],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
            )
            return editor_cmd
        except (subprocess.CalledProcessError, FileNotFoundError):
            continue

    return "vi"


def edit_note(dashboard: Dashboard):
    """Edit the selected note's content in an external text editor."""
    note = selected_note(dashboard.state)
    if note is None:
        print("Error: No note selected. Use /select <number>.\n")
        return

    dashboard.set_view_mode(ViewMode.EDIT)
    with tempfile.NamedTemporaryFile(mode="w", suffix=".md", delete=False, encoding="utf-8") as tmp:
        tmp.write(note["content"])
        tmp_file_path = tmp.name

    try:
        editor = _get_editor()
        print(f"\nOpening note '{note['title']}' in {editor}...")
        print("Edit the note, save, and close the editor to update.\n")

        try:
            subprocess.run([editor, tmp_file_path], check=True)
        except subprocess.CalledProcessError:
            print(f"\nError: Editor '{editor}' exited with an error.\n")
            return
        except FileNotFoundError:
            print(f"\nError: Editor '{editor}' not found.\n")
            print("You can set your preferred editor with: export EDITOR=nano\n")
            return

        content = Path(tmp_file_path).read_text(encoding="utf-8").strip()
        if not content:
            print("Error: Note content cannot be empty. Update cancelled.\n")
            return
        if content == note["content"]:
            print("No changes made to the note.\n")
            return

        if dashboard.update_note(note["id"], note["title"], content) is not None:
            print("✓ Note updated. Summary regenerated.\n")
    finally:
        Path(tmp_file_path).unlink(missing_ok=True)
        dashboard.set_view_mode(ViewMode.CHAT)


def rename_note(dashboard: Dashboard, title: str):
    """Rename the selected note."""
    note = selected_note(dashboard.state)
    if note is None:
        print("Error: No note selected. Use /select <number>.\n")
        return

    title = title.strip()
    if not title:
        print("Error: New title is required. Usage: /rename <new title>\n")
        return

    if dashboard.update_note(note["id"], title, note["content"]) is not None:
        print(f"\n✓ Note renamed to: {title}\n")


def summarize_note(dashboard: Dashboard):
    """Regenerate the selected note's summary."""
    note = selected_note(dashboard.state)
    if note is None:
        print("Error: No note selected. Use /select <number>.\n")
        return

    updated = dashboard.regenerate_summary(note["id"])
    if updated is not None:
        print(f"\nSummary:\n{updated['summary']}\n")


def delete_note(dashboard: Dashboard):
    """Permanently delete the selected note."""
    note = selected_note(dashboard.state)
    if note is None:
        print("Error: No note selected. Use /select <number>.\n")
        return

    confirm = input(f"Are you sure you want to delete note '{note['title']}'? (y/N): ")
    if confirm.strip().lower() not in ["y", "yes"]:
        print("\nDeletion cancelled.\n")
        return

    if dashboard.delete_note(note["id"]):
        print("\n✓ Note deleted. Its chats are kept.\n")


def add_response(dashboard: Dashboard):
    """Append the last assistant reply to the selected note."""
    if dashboard.add_response_to_note() is not None:
        print("✓ Response added to note.\n")
