from socialiser.schemas.common import CamelModel

# Preference keys only administrators may read or write.
ADMIN_ONLY_KEYS = ("systemPrompt", "preferredModel", "enableGoogleSearch")


class SettingsUpdate(CamelModel):
    name: str | None = None
    default_location: str | None = None
    social_location: str | None = None
    google_api_key: str | None = None

    # Admin only
    system_prompt: str | None = None
    preferred_model: str | None = None
    enable_google_search: bool | None = None
