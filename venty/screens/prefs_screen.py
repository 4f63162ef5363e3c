# --- Purpose -------------------------------------------------------------------
# The screen where the user points the app at a **Venty server** (host + port)
# and picks the persona and the five preference bands sent with every message.
# The fields are declared in kv_files/prefs_screen.kv and pre-filled from the
# app config; VentyApp.go_to_chatbot reads them back through `ids`.

# screens/prefs_screen.py
from kivymd.uix.screen import MDScreen

# config option names; each has a matching `<name>_field` id in the KV
SERVER_FIELDS = ("host", "port")
PREF_FIELDS = ("persona", "band1", "band2", "band3", "band4", "band5")


class PrefsScreen(MDScreen):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.name = 'prefs_screen'

    def field_values(self, keys):
        """Stripped text of the settings fields named in `keys`."""
        return {key: self.ids[f"{key}_field"].text.strip() for key in keys}
