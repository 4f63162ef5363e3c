# --- High-level overview -------------------------------------------------------
# Kivy/KivyMD entry point for the Venty chat client.
# It wires together:
#   - UI screens (server/persona preferences + chat)
#   - The [server] and [prefs] config sections (venty.ini)
#   - Calls to the Venty server via the ventyApi helpers
#   - The sentiment-based follow-up notification (FollowupScheduler + LocalNotifier)

import os
os.environ.setdefault('KIVY_GL_BACKEND', 'sdl2')
import sys
from threading import Thread

from kivy.core.window import Window
from kivy.clock import Clock
from kivy.lang import Builder
from kivy.logger import Logger
from kivy.metrics import dp
from kivy.properties import BooleanProperty, ObjectProperty, StringProperty
from kivy.resources import resource_add_path
from kivy.utils import escape_markup, platform
from kivymd.app import MDApp
from kivymd.uix.label import MDLabel

# keep the focused input visible above the soft keyboard on mobile
Window.softinput_mode = "below_target"

# imported so the KV rules can refer to the screen classes by name
from venty.screens.prefs_screen import PrefsScreen, SERVER_FIELDS, PREF_FIELDS  # noqa: F401
from venty.screens.chatbot_screen import ChatbotScreen, TempSpinWait  # noqa: F401

from venty import __version__
from venty.followup import FollowupScheduler
from venty.models import ChatRequest, Message
from venty.notifications import LocalNotifier
from venty.ventyApi import api_base_url, get_checkup_message, send_chat

## Global definitions
if getattr(sys, 'frozen', False):
    # Running as a PyInstaller bundle
    base_path = sys._MEIPASS
else:
    base_path = os.path.dirname(os.path.abspath(__file__))
kv_file_path = os.path.join(base_path, 'main_layout.kv')
kv_files_dir = os.path.join(base_path, 'kv_files')
# lets `#:include prefs_screen.kv` in main_layout.kv find the screen rules
resource_add_path(kv_files_dir)

DEFAULT_CONFIG = {
    "server": {
        "host": "10.0.0.97",
        "port": "8000",
        "timeout": "30",
    },
    "prefs": {
        "persona": "default",
        "band1": "default_band1",
        "band2": "default_band2",
        "band3": "default_band3",
        "band4": "default_band4",
        "band5": "default_band5",
    },
}


## The APP definitions
class VentyApp(MDApp):
    title = "Venty"
    api_url = StringProperty("")
    # True while a `/chat` request is in flight; blocks a second send
    is_sending = BooleanProperty(False)
    tmp_spin = ObjectProperty(None)

    def build_config(self, config):
        for section, values in DEFAULT_CONFIG.items():
            config.setdefaults(section, values)

    def get_application_config(self):
        # keep venty.ini next to the app's private data (writable on Android too)
        return super().get_application_config(
            os.path.join(self.user_data_dir, '%(appname)s.ini')
        )

    def build(self):
        self.api_url = api_base_url(
            self.config.get("server", "host"), self.config.get("server", "port")
        )
        # messages: the in-memory conversation, a list of venty.models.Message
        self.messages = []
        self.chat_history_id = None
        self.notifier = LocalNotifier()
        self.followup = FollowupScheduler(
            fetch_checkup=lambda thread_id: get_checkup_message(
                self.api_url, thread_id, timeout=self.request_timeout
            ),
            notifier=self.notifier,
        )
        self.theme_cls.primary_palette = "Gray"
        self.theme_cls.theme_style = "Light"
        Logger.info(f"Venty: Starting version {__version__}")
        return Builder.load_file(kv_file_path)

    def on_start(self):
        if platform == "android":
            # Android 13+ needs a runtime grant before local notifications show
            from android.permissions import request_permissions, Permission
            request_permissions([Permission.POST_NOTIFICATIONS])
        self._remove_notif_listener = self.notifier.add_received_listener(
            self.on_notification_received
        )

    def on_stop(self):
        self.followup.release()
        self._remove_notif_listener()

    @property
    def request_timeout(self):
        return self.config.getfloat("server", "timeout")

    def show_toast_msg(self, message, is_error=False):
        from kivymd.uix.snackbar import MDSnackbar
        bg_color = (0.2, 0.6, 0.2, 1) if not is_error else (0.8, 0.2, 0.2, 1)
        MDSnackbar(
            MDLabel(
                text=message,
                font_style="Subtitle1"
            ),
            md_bg_color=bg_color,
            y=dp(24),
            pos_hint={"center_x": 0.5},
            duration=3
        ).open()

    def go_to_chatbot(self, instance, prefs_screen):
        # Saves the settings fields to venty.ini and opens the chat screen.
        # Blank server fields keep the configured value; blank persona/bands are
        # stored blank and replaced by their defaults in ChatRequest.from_prefs.
        for key, value in prefs_screen.field_values(SERVER_FIELDS).items():
            if value:
                self.config.set("server", key, value)
            else:
                self.show_toast_msg(f"Using configured {key}")
        for key, value in prefs_screen.field_values(PREF_FIELDS).items():
            self.config.set("prefs", key, value)
        self.config.write()
        self.api_url = api_base_url(
            self.config.get("server", "host"), self.config.get("server", "port")
        )
        self.root.current = 'chatbot_screen'

    def go_back_to_prefs(self, instance):
        self.root.current = 'prefs_screen'

    def add_message(self, message):
        # Appends a Message to the conversation and renders it as a chat bubble.
        self.messages.append(message)
        if message.sender == "user":
            markup = f"[b][color=#2196F3]You:[/color][/b] {escape_markup(message.text)}"
            halign = 'right'
        else:
            markup = f"[b][color=#1A1A1A]Venty:[/color][/b] {escape_markup(message.text)}"
            halign = 'left'
        msg_label = MDLabel(
            size_hint_y=None,
            markup=True,
            halign=halign,
            valign='top',
            padding=[dp(10), dp(10)],
            font_style="Subtitle1",
            allow_selection=True,
            allow_copy=True,
            text=markup,
        )
        msg_label.bind(texture_size=msg_label.setter('size'))
        if self.chat_history_id is not None:
            self.chat_history_id.add_widget(msg_label)
            self.scroll_to_end()

    def scroll_to_end(self):
        # wait a frame so the new label has its final height
        Clock.schedule_once(lambda dt: setattr(self.chat_scroll, 'scroll_y', 0))

    def send_message(self, button_instance, chat_input_widget):
        if self.is_sending:
            self.show_toast_msg("Please wait for the current response", is_error=True)
            return
        user_message = chat_input_widget.text.strip()
        if not user_message:
            self.show_toast_msg("Please type a message!", is_error=True)
            return
        chat_input_widget.text = ""
        chat_input_widget.focus = False
        # a new message supersedes the previous exchange's follow-up
        self.followup.cancel()
        self.add_message(Message.from_user(user_message))

        chat_request = ChatRequest.from_prefs(user_message, dict(self.config.items("prefs")))
        self.tmp_spin = TempSpinWait()
        self.chat_history_id.add_widget(self.tmp_spin)
        self.is_sending = True
        chat_thread = Thread(
            target=send_chat,
            args=(self.api_url, chat_request, self.chat_callback),
            kwargs={"timeout": self.request_timeout},
            daemon=True,
        )
        chat_thread.start()

    def chat_callback(self, chat_resp):
        # Runs on the main thread with the parsed reply, or None if the send failed.
        self.chat_history_id.remove_widget(self.tmp_spin)
        self.tmp_spin = None
        self.is_sending = False
        if chat_resp is None:
            # already logged by send_chat; the user's message stays, no bot reply
            return
        self.add_message(Message.from_bot(chat_resp.bot_reply))
        self.followup.start(chat_resp.sentiment_score, chat_resp.thread_id)

    def on_notification_received(self, message):
        self.add_message(Message.from_bot(message))
        self.show_toast_msg(message)

    def update_chatbot_welcome(self, screen_instance):
        # Called each time the chat screen is shown; wires the ids and prints
        # which server the conversation goes to.
        self.chat_history_id = screen_instance.ids.chat_history_id
        self.chat_scroll = screen_instance.ids.chat_scroll
        init_msg_label = MDLabel(
            size_hint_y=None,
            markup=True,
            halign='center',
            valign='top',
            padding=[dp(10), dp(10)],
            font_style="Caption",
            text=f"[color=#0000FF]Init:[/color] Your Venty server: {self.api_url}",
        )
        init_msg_label.bind(texture_size=init_msg_label.setter('size'))
        self.chat_history_id.add_widget(init_msg_label)


def main():
    VentyApp().run()


if __name__ == '__main__':
    main()
