import json
import os
from datetime import datetime
import pytz
import yaml
from dateutil.parser import parse as parse_dt
from models import DAY_LENGTH, Event, MeetingRequest, Member, TimeRange, format_clock

# Constants
DATA_DIR = 'data'
CONFIG_FILE = os.path.join(DATA_DIR, 'config.json')
DEFAULT_TIMEZONE = 'America/New_York'

class ConfigError(ValueError):
    """Raised when a configuration file or entry cannot be used."""

# ===== File I/O Utilities =====

def load_json(path):
    """Load JSON data from a file."""
    if not os.path.exists(path):
        return {}
    with open(path, 'r') as f:
        return json.load(f)

def save_json(path, data):
    """Save JSON data to a file."""
    os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)

# ===== Configuration Management =====

def set_timezone(timezone):
    """Set the default timezone in configuration."""
    if timezone not in pytz.all_timezones_set:
        raise ConfigError(f"Unknown timezone: {timezone}")
    config = load_json(CONFIG_FILE)
    config['timezone'] = timezone
    save_json(CONFIG_FILE, config)
    print(f"Set default timezone: {timezone}")

def get_timezone():
    """Get the default timezone from configuration."""
    return load_json(CONFIG_FILE).get('timezone', DEFAULT_TIMEZONE)

def load_config(path):
    """Load a scheduling config (members, events, request) from a YAML file."""
    with open(path, 'r') as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(config).__name__}")
    return config

# ===== Time Utilities =====

def parse_clock(value):
    """Convert '9:30', '2pm', '24:00' or a minute offset to minutes since midnight."""
    if isinstance(value, bool):
        raise ConfigError(f"Invalid time: {value!r}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ConfigError(f"Invalid time: {value!r}")
    text = value.strip()
    if text in ('24:00', '24:00:00'):
        return DAY_LENGTH
    try:
        dt = parse_dt(text, default=datetime(2000, 1, 1))
    except (ValueError, OverflowError) as e:
        raise ConfigError(f"Invalid time: {value!r}") from e
    if dt.second or dt.microsecond:
        raise ConfigError(f"Times must be whole minutes: {value!r}")
    return dt.hour * 60 + dt.minute

def slots_to_dicts(slots):
    """Serialize time ranges for JSON output."""
    return [{'start': format_clock(s.start), 'end': format_clock(s.end), 'duration': s.duration} for s in slots]

# ===== Config to Models =====

def _names(entry, key):
    names = entry.get(key) or []
    if isinstance(names, str):
        names = [names]
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise ConfigError(f"'{key}' must be a list of names: {entry}")
    return names

def build_members(config):
    """Build Member objects from the 'members' section."""
    members = []
    for m in config.get('members') or []:
        if 'name' not in m or 'calendar_id' not in m:
            raise ConfigError(f"Member needs 'name' and 'calendar_id': {m}")
        members.append(Member(name=m['name'], calendar_id=m['calendar_id']))
    return members

def build_events(config):
    """Build Event objects from the 'events' section."""
    events = []
    for i, e in enumerate(config.get('events') or []):
        if 'start' not in e or ('end' not in e and 'duration' not in e):
            raise ConfigError(f"Event needs 'start' and either 'end' or 'duration': {e}")
        start = parse_clock(e['start'])
        try:
            if 'end' in e:
                when = TimeRange.from_start_end(start, parse_clock(e['end']), inclusive=False)
            else:
                duration = e['duration']
                if isinstance(duration, bool) or not isinstance(duration, int):
                    raise ConfigError(f"Duration must be a whole number of minutes: {duration!r}")
                when = TimeRange.from_start_duration(start, duration)
        except (TypeError, ValueError) as err:
            raise ConfigError(f"Invalid event time for {e.get('name', f'event {i}')}: {err}") from err
        events.append(Event(name=e.get('name', f"event {i}"), when=when, attendees=_names(e, 'attendees')))
    return events

def build_request(config, duration=None):
    """Build the MeetingRequest from the 'request' section, optionally overriding the duration."""
    request = config.get('request') or {}
    if duration is None:
        duration = request.get('duration', 60)
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise ConfigError(f"Duration must be a whole number of minutes: {duration!r}")
    return MeetingRequest(
        duration=duration,
        attendees=tuple(_names(request, 'attendees')),
        optional_attendees=tuple(_names(request, 'optional_attendees')),
    )
