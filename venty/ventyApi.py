# --- Purpose -------------------------------------------------------------------
# Thin client helpers for talking to the **Venty** chat server from Kivy/KivyMD.
#
# - `api_base_url(host, port)`: build the server root from the [server] config.
# - `send_chat(url, chat_request, callback=None)`: POST the user's message to
#   `/chat` and either return the parsed reply or hand it to a UI callback.
# - `get_checkup_message(url, thread_id)`: GET the follow-up prompt for a thread.
#
# Both calls are blocking (`requests`), so screens run them on a worker Thread.
# Failures are logged and turned into `None`; nothing here raises to the caller.

import requests  # requests: synchronous HTTP client (GET/POST, JSON helpers).
from kivy.clock import Clock  # Clock: schedules a function on the Kivy main loop.
from kivy.logger import Logger

from venty.models import ChatResponse, CheckupResponse

DEFAULT_TIMEOUT = 30


def api_base_url(host, port):
    return f"http://{host}:{port}"


def send_chat(url, chat_request, callback=None, timeout=DEFAULT_TIMEOUT):
    """
    Send one user message to `/chat` and deliver the server's reply.

    Parameters
    - url (str): server root, e.g. "http://10.0.0.97:8000".
    - chat_request (ChatRequest): message text plus persona and bands.
    - callback (callable|None): if provided, scheduled on the main thread with
      the result; otherwise the result is returned directly.
    - timeout (float): seconds before the request is abandoned.

    The result is a `ChatResponse`, or `None` when the request failed in any
    way (connection refused, timeout, 4xx/5xx, invalid JSON, no `bot_reply`).
    """
    chat_url = f"{url}/chat"
    chat_resp = None
    Logger.info(f"VentyApi: POST {chat_url}")
    try:
        response = requests.post(chat_url, json=chat_request.model_dump(), timeout=timeout)
        response.raise_for_status()
        chat_resp = ChatResponse.model_validate(response.json())
    except (requests.RequestException, ValueError) as e:
        # ValueError covers both a non-JSON body and a pydantic ValidationError.
        Logger.error(f"VentyApi: Error sending message: {e}")
        chat_resp = None
    if callback:
        # schedule_once: the callback touches widgets, so it must run on the
        # Kivy main thread rather than on the worker thread that called us.
        Clock.schedule_once(lambda dt: callback(chat_resp))
    else:
        return chat_resp


def get_checkup_message(url, thread_id, timeout=DEFAULT_TIMEOUT):
    """
    Return the checkup prompt for `thread_id`, or None if there isn't one.

    None covers both a failed request and a reply without `checkup_message`.
    """
    checkup_url = f"{url}/checkup"
    Logger.info(f"VentyApi: Fetching checkup message for thread '{thread_id}'")
    try:
        response = requests.get(checkup_url, params={"thread_id": thread_id}, timeout=timeout)
        response.raise_for_status()
        checkup = CheckupResponse.model_validate(response.json())
    except (requests.RequestException, ValueError) as e:
        Logger.error(f"VentyApi: Error fetching checkup message: {e}")
        return None
    return checkup.checkup_message or None
