"""
Minutes of Meeting email templates
Each builder returns an (html, text) pair; all user text is HTML-escaped.
"""

from typing import Optional, Sequence

from .models import Meeting, MeetingNote, Participant
from .utils.sanitization import sanitize_string

THEME = {
    "primary": "#3B82F6",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}

NOTE_TYPE_LABELS = {
    "general": "General Notes",
    "action": "Action Items",
    "objective": "Objectives",
    "decision": "Decisions",
    "idea": "Ideas",
    "issue": "Issues",
    "follow-up": "Follow-ups",
}


def _format_date(value) -> str:
    return value.strftime("%B %d, %Y %H:%M") if value else "Unknown date"


def _note_line(note: MeetingNote) -> str:
    """Plain-text line for a note, with assignment details for action items"""
    line = f"- {note.title + ': ' if note.title else ''}{note.content} [{note.priority}]"
    if note.note_type == "action":
        if note.assigned_to_name or note.assigned_to_email:
            line += f" (assigned to {note.assigned_to_name or note.assigned_to_email})"
        if note.due_date:
            line += f" due {note.due_date.isoformat()}"
    return line


def _note_html(note: MeetingNote) -> str:
    title = f"<strong>{sanitize_string(note.title)}:</strong> " if note.title else ""
    details = ""
    if note.note_type == "action":
        assignee = note.assigned_to_name or note.assigned_to_email
        if assignee:
            details += f" <em>Assigned to {sanitize_string(assignee)}</em>"
        if note.due_date:
            details += f" <em>Due {note.due_date.isoformat()}</em>"
    return (
        f'<li style="margin-bottom: 8px;">{title}{sanitize_string(note.content)}'
        f' <span style="color: {THEME["text_muted"]};">[{note.priority}]</span>{details}</li>'
    )


def get_base_template(title: str, content_sections: str) -> str:
    """HTML wrapper shared by all minutes emails"""
    return f"""<html>
<body style="background-color: {THEME['background']}; font-family: -apple-system, 'Segoe UI', Arial, sans-serif; color: {THEME['text_secondary']};">
  <div style="max-width: 640px; margin: 0 auto; background-color: {THEME['card_bg']}; padding: 32px; border: 1px solid {THEME['border']};">
    <h1 style="font-size: 22px; color: {THEME['text_primary']}; margin-top: 0;">{title}</h1>
    {content_sections}
  </div>
</body>
</html>"""


def minutes_email_content(
    meeting: Meeting,
    notes: Sequence[MeetingNote],
    participants: Sequence[Participant],
    action_items_only: bool = False,
    assignee_email: Optional[str] = None,
) -> tuple[str, str]:
    """
    Build the minutes email.

    With action_items_only the email carries only the action notes assigned
    to `assignee_email` and no participant list.
    """
    meeting_name = sanitize_string(meeting.name)
    date_label = _format_date(meeting.start_time)

    if action_items_only:
        target = (assignee_email or "").lower()
        selected = [
            n for n in notes if n.note_type == "action" and (n.assigned_to_email or "").lower() == target
        ]
        sections = {"action": selected}
        title = "Action Items from Meeting"
    else:
        sections = {}
        for note_type in NOTE_TYPE_LABELS:
            typed = [n for n in notes if n.note_type == note_type]
            if typed:
                sections[note_type] = typed
        title = "Minutes of Meeting"

    html_parts = [f'<p style="color: {THEME["text_muted"]};">Meeting date: {date_label}</p>']
    text_parts = [f"{title}: {meeting.name}", f"Meeting date: {date_label}", ""]

    if not action_items_only:
        html_parts.append(f"<h2 style=\"font-size: 18px;\">Participants ({len(participants)})</h2><ul>")
        text_parts.append(f"Participants ({len(participants)}):")
        for p in participants:
            html_parts.append(
                f"<li>{sanitize_string(p.name)} - {p.speaking_count} speaking point(s)</li>"
            )
            text_parts.append(f"- {p.name} - {p.speaking_count} speaking point(s)")
        html_parts.append("</ul>")
        text_parts.append("")

    for note_type, typed_notes in sections.items():
        label = NOTE_TYPE_LABELS[note_type]
        html_parts.append(f'<h2 style="font-size: 18px;">{label}</h2><ul>')
        html_parts.extend(_note_html(n) for n in typed_notes)
        html_parts.append("</ul>")
        text_parts.append(f"{label}:")
        text_parts.extend(_note_line(n) for n in typed_notes)
        text_parts.append("")

    if not any(sections.values()):
        html_parts.append("<p>No notes were recorded.</p>")
        text_parts.append("No notes were recorded.")

    return get_base_template(f"{title}: {meeting_name}", "\n    ".join(html_parts)), "\n".join(text_parts).strip() + "\n"
