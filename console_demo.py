"""
Offline console demo: runs a full booking conversation with no browser.

This drives the real orchestrator, profile store, provider directory and
field mapper; only the booking page itself is mocked (one fixed intake
form, submissions recorded in memory). Pass --live to use the Playwright
adapters against real booking URLs instead.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario missing_info
    python console_demo.py --live
"""

import argparse
import asyncio

from booking_orchestrator.config import settings
from booking_orchestrator.conversation.orchestrator import BookingOrchestrator
from booking_orchestrator.conversation.state_machine import BookingStateMachine
from booking_orchestrator.prompts.reply_templates import build_greeting_reply
from booking_orchestrator.session import BookingSession, build_default_orchestrator
from booking_orchestrator.tools.demo_forms import RecordingFormActuator, StaticFormInspector
from booking_orchestrator.tools.field_mapping import RuleBasedFieldMapper
from booking_orchestrator.tools.profiles import JsonProfileStore
from booking_orchestrator.tools.providers import StaticProviderDirectory

BLUE = "\033[94m"
GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


def build_offline_orchestrator(actuator: RecordingFormActuator) -> BookingOrchestrator:
    return BookingOrchestrator(
        profile_store=JsonProfileStore(settings.data.profile_data_path),
        provider_directory=StaticProviderDirectory(
            max_results=settings.booking.max_recommendations
        ),
        form_inspector=StaticFormInspector(),
        field_mapper=RuleBasedFieldMapper(),
        form_actuator=actuator,
    )


class ConsoleSession:
    """Plays a booking conversation in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "Hi, I'd like to book a doctor's appointment",
            "my user id is user_12345",
            "1",
            "next Tuesday morning",
            "yes please",
        ],
        "missing_info": [
            "user_67890",
            "2",
            "1979-08-30",
            "AET778812",
            "March 3rd",
            "I'd like to change something",
            "Please note I use a wheelchair",
            "confirm",
        ],
        "change_provider": [
            "user_12345",
            "3",
            "Friday",
            "actually, can I see a different provider?",
            "1",
            "Monday",
            "ok",
        ],
        "cancel": [
            "user_24680",
            "1",
            "tomorrow",
            "cancel",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self, live: bool = False) -> None:
        self.actuator = RecordingFormActuator()
        orchestrator = build_default_orchestrator() if live else build_offline_orchestrator(
            self.actuator
        )
        self.session = BookingSession(orchestrator)

    def agent_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  APPOINTMENT BOOKING ASSISTANT - {title}{RESET}")
        print(f"{BOLD}  {settings.app_name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _summary(self, title: str) -> None:
        trace = BookingStateMachine(self.session.state).get_stage_trace()
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {title}{RESET}")
        print(f"{DIM}  Stage trace: {' -> '.join(trace)}{RESET}")
        print(f"{DIM}  Recorded submissions: {len(self.actuator.submissions)}{RESET}")
        for record in self.actuator.submissions:
            print(f"{DIM}    {record['submission_ref']} {record['url']}{RESET}")
            for field_id, value in record["values"].items():
                print(f"{DIM}      {field_id} = {value}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def _process_input(self, text: str) -> None:
        reply = await self.session.send(text)
        self.agent_say(reply)
        self.system_log(f"Stage: {self.session.stage.value}")

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for step in steps:
            print(f"\n{BLUE}[User] {RESET}{step}")
            await self._process_input(step)

        self._summary(f"Scenario '{scenario}' complete.")

    async def run(self) -> None:
        self._banner("Console Demo")
        print(f"{DIM}  Type 'quit' to exit, 'reset' to start a new session{RESET}")
        self.agent_say(build_greeting_reply())

        while True:
            user_input = (await asyncio.to_thread(input, f"\n{BLUE}[User] {RESET}")).strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                break
            if user_input.lower() == "reset":
                self.agent_say(await self.session.send("", reset=True))
                continue
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.agent_say("That was quite long. Could you keep it brief for me?")
                continue

            await self._process_input(user_input)

        self._summary("Conversation complete.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument(
        "--live",
        action="store_true",
        help="Inspect and submit real booking pages with Playwright",
    )
    args = parser.parse_args()

    console = ConsoleSession(live=args.live)
    if args.scenario:
        asyncio.run(console.run_scenario(args.scenario))
    else:
        asyncio.run(console.run())


if __name__ == "__main__":
    main()
