from google.auth.transport.requests import Request
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
import math
import pickle
import os
from datetime import datetime, time, timedelta
import pytz
from dateutil.parser import parse as parse_dt
from logging_config import get_logger
from models import DAY_LENGTH, Event, TimeRange

SCOPES = ['https://www.googleapis.com/auth/calendar']
TOKEN_PATH = 'token.pickle'
CREDENTIALS_PATH = 'credentials.json'

logger = get_logger(__name__)

def authenticate_google():
    creds = None
    if os.path.exists(TOKEN_PATH):
        with open(TOKEN_PATH, 'rb') as token:
            creds = pickle.load(token)
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            flow = InstalledAppFlow.from_client_secrets_file(CREDENTIALS_PATH, SCOPES)
            creds = flow.run_local_server(port=0)
        with open(TOKEN_PATH, 'wb') as token:
            pickle.dump(creds, token)
    service = build('calendar', 'v3', credentials=creds)
    return service

def list_calendars(service):
    calendars = service.calendarList().list().execute()
    for cal in calendars.get('items', []):
        print(f"{cal['summary']} (ID: {cal['id']})")

def day_window(day, tz_name):
    """Return the local midnight-to-midnight bounds of a day as aware datetimes."""
    tz = pytz.timezone(tz_name)
    start = tz.localize(datetime.combine(day, time.min))
    end = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return start, end

def _to_utc_iso(dt):
    return dt.astimezone(pytz.utc).isoformat().replace('+00:00', 'Z')

def _list_events(service, calendar_id, time_min, time_max):
    items = []
    page_token = None
    while True:
        result = service.events().list(
            calendarId=calendar_id,
            timeMin=time_min,
            timeMax=time_max,
            singleEvents=True,
            orderBy='startTime',
            pageToken=page_token
        ).execute()
        items.extend(result.get('items', []))
        page_token = result.get('nextPageToken')
        if not page_token:
            return items

def _is_busy(event):
    if event.get('status') == 'cancelled' or event.get('transparency') == 'transparent':
        return False
    for attendee in event.get('attendees', []):
        if attendee.get('self') and attendee.get('responseStatus') == 'declined':
            return False
    return True

def _minutes_since(value, day_start, tz):
    dt = parse_dt(value)
    if dt.tzinfo is None:
        # All-day events come as bare dates in the calendar's local day
        dt = tz.localize(dt)
    return (dt - day_start).total_seconds() / 60

def to_time_range(event, day_start, tz):
    """Clip a Google Calendar event to the day starting at day_start, in whole minutes."""
    start = event['start'].get('dateTime', event['start'].get('date'))
    end = event['end'].get('dateTime', event['end'].get('date'))
    start_min = max(0, math.floor(_minutes_since(start, day_start, tz)))
    end_min = min(DAY_LENGTH, math.ceil(_minutes_since(end, day_start, tz)))
    if end_min <= start_min:
        return None
    return TimeRange(start_min, end_min)

def fetch_day_events(service, members, day, tz_name):
    """Fetch every member's busy events for a local day as Event objects."""
    tz = pytz.timezone(tz_name)
    day_start, day_end = day_window(day, tz_name)
    time_min, time_max = _to_utc_iso(day_start), _to_utc_iso(day_end)
    merged = {}
    for member in members:
        items = _list_events(service, member.calendar_id, time_min, time_max)
        logger.debug(f"Fetched {len(items)} event(s) for {member.name}")
        for item in items:
            if not _is_busy(item):
                continue
            when = to_time_range(item, day_start, tz)
            if when is None:
                continue
            # The same meeting shows up once per invited member's calendar;
            # recurring instances share an iCalUID but not a time
            key = (item.get('iCalUID') or item['id'], when)
            if key not in merged:
                merged[key] = (item.get('summary', ''), when, set())
            merged[key][2].add(member.name)
    events = [Event(name=name, when=when, attendees=attendees) for name, when, attendees in merged.values()]
    events.sort(key=lambda e: e.when.start)
    return events

def create_event(service, calendar_id, summary, start_time, end_time, attendees=None, description=None):
    event = {
        'summary': summary,
        'start': {'dateTime': start_time, 'timeZone': 'UTC'},
        'end': {'dateTime': end_time, 'timeZone': 'UTC'},
    }
    if attendees:
        event['attendees'] = [{'email': email} for email in attendees]
    if description:
        event['description'] = description
    return service.events().insert(calendarId=calendar_id, body=event).execute()

def slot_to_utc_iso(slot, day, tz_name):
    """Convert a minute-offset slot on a local day to UTC ISO start/end strings."""
    day_start, _ = day_window(day, tz_name)
    start = day_start + timedelta(minutes=slot.start)
    end = day_start + timedelta(minutes=slot.end)
    return _to_utc_iso(start), _to_utc_iso(end)
