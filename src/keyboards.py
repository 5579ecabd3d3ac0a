"""
Reply keyboard builders for the Vacancy Bot.
"""

from typing import Optional, Union

from telegram import KeyboardButton, ReplyKeyboardMarkup, ReplyKeyboardRemove

from models import Reply, ReplyButton


def build_button(button: ReplyButton) -> KeyboardButton:
    """Plain text button, or one that asks Telegram for contact/location."""
    return KeyboardButton(
        button.text,
        request_contact=button.request_contact or None,
        request_location=button.request_location or None
    )


def build_reply_markup(
    reply: Reply
) -> Optional[Union[ReplyKeyboardMarkup, ReplyKeyboardRemove]]:
    """
    Build the reply markup for an engine reply.

    Returns:
        ReplyKeyboardMarkup when the reply carries options,
        ReplyKeyboardRemove when it asks to hide the keyboard,
        None otherwise (keep whatever the user sees)
    """
    if reply.keyboard:
        rows = [[build_button(b) for b in row] for row in reply.keyboard]
        return ReplyKeyboardMarkup(
            rows,
            resize_keyboard=True,
            one_time_keyboard=reply.one_time
        )
    if reply.remove_keyboard:
        return ReplyKeyboardRemove()
    return None
