"""
Transport layer — everything that talks to the Game Data API.

Submodules:
  base             — ``Transport`` contract consumed by the directory
  blizzard_client  — httpx implementation (OAuth2, 401 refresh, 500 retry)
  static           — canned-payload transport for tests and offline use

Credential placement (.env, gitignored):
  BLIZZARD_CLIENT_ID         — Blizzard OAuth2 client ID
  BLIZZARD_CLIENT_SECRET     — Blizzard OAuth2 client secret
"""
