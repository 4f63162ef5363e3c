# --- Purpose -------------------------------------------------------------------
# The *Chatbot* screen: conversation history, message input and send button.
#   • TempSpinWait: placeholder row holding a spinner while `/chat` is in flight
#     (the spinner itself is declared in kv_files/chatbot_screen.kv).
#   • ChatbotScreen: the Screen the ScreenManager switches to once the server and
#     persona are set. Widgets live in KV and are reached through `ids`.

# screens/chatbot_screen.py
from kivymd.uix.screen import MDScreen
from kivymd.uix.boxlayout import MDBoxLayout


class TempSpinWait(MDBoxLayout):
    pass


class ChatbotScreen(MDScreen):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # must match `self.root.current = 'chatbot_screen'` in VentyApp
        self.name = 'chatbot_screen'
