import argparse
import json
import sys
from datetime import datetime

from calendar_service import (
    authenticate_google, create_event, fetch_day_events, list_calendars, slot_to_utc_iso
)
from logging_config import setup_logging
from scheduler import MeetingQuery
from utils import (
    ConfigError, build_events, build_members, build_request, get_timezone,
    load_config, set_timezone, slots_to_dicts
)

def print_result(result, request, as_json=False):
    """Print the slots found for a request, either as text or JSON."""
    left_out = [name for name in request.optional_attendees if name not in result.optional_attendees]
    if as_json:
        print(json.dumps({
            'duration': request.duration,
            'attendees': list(request.attendees),
            'optional_attendees_included': list(result.optional_attendees),
            'optional_attendees_left_out': left_out if result.slots else list(request.optional_attendees),
            'slots': slots_to_dicts(result.slots),
        }, indent=2))
        return
    if not result.slots:
        print('No available meeting times found.')
        return
    print(f"Available {request.duration}-minute slots:")
    for slot in result.slots:
        print(f"  {slot}")
    if result.optional_attendees:
        print(f"Optional attendees included: {', '.join(result.optional_attendees)}")
    if left_out:
        print(f"Optional attendees left out: {', '.join(left_out)}")

def find_times(args):
    config = load_config(args.config_file)
    events = build_events(config)
    request = build_request(config, args.duration)
    result = MeetingQuery().resolve(events, request)
    print_result(result, request, args.json)

def find_times_gcal(args):
    config = load_config(args.config_file)
    members = build_members(config)
    request = build_request(config, args.duration)
    try:
        day = datetime.strptime(args.date, '%Y-%m-%d').date()
    except ValueError as e:
        raise ConfigError(f"Date must be YYYY-MM-DD: {args.date}") from e
    known = {m.name for m in members}
    for name in request.attendees + request.optional_attendees:
        if name not in known:
            print(f"Warning: No calendar configured for '{name}', treating them as free all day")
    tz_name = get_timezone()
    service = authenticate_google()
    events = fetch_day_events(service, members, day, tz_name)
    result = MeetingQuery().resolve(events, request)
    print_result(result, request, args.json)
    if args.book and result.slots:
        slot = result.slots[0]
        start_time, end_time = slot_to_utc_iso(slot, day, tz_name)
        invited = set(request.attendees) | set(result.optional_attendees)
        emails = [m.calendar_id for m in members if m.name in invited]
        create_event(service, args.book, args.title, start_time, end_time, attendees=emails)
        print(f"Booked '{args.title}' on {day} at {slot}")

def main(argv=None):
    """Main entry point for the meeting-finder CLI application."""
    parser = argparse.ArgumentParser(description='meeting-finder CLI')
    parser.add_argument('--log-level', type=str, default=None, help='Log level (default: WARNING)')
    subparsers = parser.add_subparsers(dest='command')

    # ===== Google Calendar Commands =====
    subparsers.add_parser('auth', help='Authenticate with Google Calendar')
    subparsers.add_parser('list-calendars', help='List all calendars')

    # ===== Timezone Management =====
    parser_set_tz = subparsers.add_parser('set-timezone', help='Set the default timezone (e.g., America/New_York)')
    parser_set_tz.add_argument('timezone', type=str, help='Timezone name')
    subparsers.add_parser('show-timezone', help='Show the current default timezone')

    # ===== Scheduling Commands =====
    parser_find = subparsers.add_parser('find-times', help='Find meeting times from events in a YAML config file')
    parser_find.add_argument('config_file', type=str, help='YAML config file path')
    parser_find_gcal = subparsers.add_parser('find-times-gcal', help="Find meeting times from members' Google Calendars")
    parser_find_gcal.add_argument('config_file', type=str, help='YAML config file path')
    parser_find_gcal.add_argument('date', type=str, help='Day to schedule (YYYY-MM-DD, in the default timezone)')
    parser_find_gcal.add_argument('--book', type=str, metavar='CALENDAR_ID', help='Create the meeting at the first slot in this calendar')
    parser_find_gcal.add_argument('--title', type=str, default='Meeting', help='Title of the booked meeting')
    for p in (parser_find, parser_find_gcal):
        p.add_argument('--duration', type=int, default=None, help='Duration in minutes (overrides config)')
        p.add_argument('--json', action='store_true', help='Print the result as JSON')

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        # ===== Google Calendar Commands =====
        if args.command in ['auth', 'list-calendars']:
            service = authenticate_google()
            if args.command == 'list-calendars':
                list_calendars(service)
            else:
                print('Authenticated with Google Calendar.')

        # ===== Timezone Management Commands =====
        elif args.command == 'set-timezone':
            set_timezone(args.timezone)
        elif args.command == 'show-timezone':
            print(f"Default timezone: {get_timezone()}")

        # ===== Scheduling Commands =====
        elif args.command == 'find-times':
            find_times(args)
        elif args.command == 'find-times-gcal':
            find_times_gcal(args)
        else:
            parser.print_help()
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(main())
