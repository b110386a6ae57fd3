"""User-facing reply construction for every stage of the booking conversation."""

from typing import Optional

from booking_orchestrator.schemas.profile_schema import UserProfile
from booking_orchestrator.schemas.provider_schema import Provider

EXAMPLE_USER_ID = "user_12345"

# Key under which free-text additions are collected.
ADDITIONAL_INFO_KEY = "additionalInfo"


def build_greeting_reply() -> str:
    return (
        "Hello! I can help you book a medical appointment. "
        f"To get started, please share your user ID (for example, {EXAMPLE_USER_ID})."
    )


def build_identifier_prompt() -> str:
    return (
        "I'd be happy to help you book an appointment. "
        f"Could you share your user ID first? It looks like {EXAMPLE_USER_ID}."
    )


def build_profile_not_found_reply(user_id: str) -> str:
    return (
        f"I couldn't find a profile for {user_id}. "
        "Please double-check your user ID and send it again."
    )


def build_provider_list_reply(
    profile: UserProfile, providers: list[Provider], demo_profile: bool = False
) -> str:
    """Numbered provider list, 1-indexed, in ranking order."""
    lines = [f"Welcome, {profile.first_name}!"]
    if demo_profile:
        lines.append(
            "I couldn't reach the profile service, so I'm using demo details for now."
        )
    if profile.insurance_provider:
        lines.append(
            f"Here are providers that accept {profile.insurance_provider}:"
        )
    else:
        lines.append("Here are providers I recommend:")
    lines.extend(_format_provider_lines(providers))
    lines.append("\nReply with the number of the provider you'd like to book with.")
    return "\n".join(lines)


def build_provider_list_again(providers: list[Provider]) -> str:
    lines = ["No problem. Here are the providers again:"]
    lines.extend(_format_provider_lines(providers))
    lines.append("\nReply with the number of the provider you'd like to book with.")
    return "\n".join(lines)


def _format_provider_lines(providers: list[Provider]) -> list[str]:
    lines = []
    for index, provider in enumerate(providers, start=1):
        availability = "" if provider.available else " (limited availability)"
        lines.append(
            f"{index}. {provider.name} - {provider.specialty}, {provider.location}, "
            f"rated {provider.rating:.1f}/5{availability}"
        )
    return lines


def build_no_providers_reply(insurance: Optional[str]) -> str:
    plan = f" that accept {insurance}" if insurance else ""
    return (
        f"I couldn't find any providers{plan} right now. "
        "Please try again later or contact your insurance company for in-network options."
    )


def build_provider_lookup_failed_reply() -> str:
    return (
        "I'm having trouble reaching the provider directory right now. "
        "Please send your message again in a moment."
    )


def build_selection_prompt() -> str:
    return "Please reply with the number of the provider you'd like to book with (for example, 1)."


def build_invalid_selection_reply(choice: int, count: int) -> str:
    return (
        f"{choice} isn't one of the options. "
        f"Please pick a number between 1 and {count}."
    )


def build_provider_selected_reply(provider: Provider) -> str:
    return f"Great choice! Let me look at {provider.name}'s booking form."


def build_missing_field_prompt(label: str, remaining: int) -> str:
    """Ask for exactly one missing field."""
    more = "" if remaining <= 1 else f" ({remaining} items left)"
    return f"The booking form needs a bit more information{more}. What is your {label}?"


def build_next_field_prompt(label: str) -> str:
    return f"Thanks! Next, what is your {label}?"


def build_ready_to_book_summary(
    profile: UserProfile, provider: Provider, collected: Optional[dict[str, str]] = None
) -> str:
    """Read-back of what will be submitted, ending with the confirmation question."""
    lines = ["I have everything I need to book your appointment:"]
    lines.append(f"  Provider: {provider.name} ({provider.specialty})")
    lines.append(f"  Patient: {profile.full_name}")
    if profile.phone:
        lines.append(f"  Phone: {profile.phone}")
    if profile.email:
        lines.append(f"  Email: {profile.email}")
    if profile.insurance_provider:
        lines.append(f"  Insurance: {profile.insurance_provider}")
    for label, value in (collected or {}).items():
        display = "Additional information" if label == ADDITIONAL_INFO_KEY else label
        lines.append(f"  {display}: {value}")
    lines.append("\nShall I go ahead and book? (yes to confirm)")
    return "\n".join(lines)


def build_analysis_failure_reply(provider: Provider) -> str:
    return (
        f"I couldn't read {provider.name}'s online booking form. "
        "You can send any message to let me try again, ask for a different provider, "
        f"or call the office directly at {provider.phone}."
    )


def build_booking_confirmation(provider: Provider) -> str:
    return (
        f"Your appointment request with {provider.name} has been submitted! "
        f"The office is at {provider.address}. "
        f"If you need to make changes, call them at {provider.phone}. "
        "Is there anything else I can help you with?"
    )


def build_booking_failure_reply(provider: Provider) -> str:
    return (
        f"I wasn't able to submit the booking form for {provider.name}. "
        "Reply yes to try again, or you can book by phone at "
        f"{provider.phone}."
    )


def build_booking_options_reply(provider: Provider) -> str:
    return (
        f"Would you like me to book with {provider.name}? You can:\n"
        "  - reply yes to confirm the booking\n"
        "  - ask for a different provider\n"
        "  - say change to update your information\n"
        "  - say cancel to stop"
    )


def build_modify_prompt() -> str:
    return "Sure. What would you like to add or change? I'll include it with your booking."


def build_cancelled_reply() -> str:
    return (
        "Okay, I've cancelled this booking. "
        "Send your user ID whenever you'd like to start again."
    )


def build_restart_reply() -> str:
    return "Let's start over. " + build_greeting_reply()
