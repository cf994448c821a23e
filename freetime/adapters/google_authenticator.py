"""
Google Calendar authentication using the OAuth installed-app flow.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from rich.console import Console

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

console = Console()


class GoogleAuthenticator:
    """
    Handles authentication with the Google Calendar API.

    Flow:
    1. Load the authorized-user token from the cache file
    2. Refresh it if it expired and carries a refresh token
    3. Otherwise run the installed-app flow in the browser
    4. Save the resulting token back to the cache file
    """

    # Required scopes for calendar access
    SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]

    def __init__(
        self,
        client_secret_file: Path,
        token_cache_file: Path,
        open_browser: bool = True
    ):
        """
        Initialize the authenticator.

        Args:
            client_secret_file: OAuth client secret JSON downloaded from the
                Google Cloud console
            token_cache_file: Where the authorized-user token is cached
            open_browser: Open the consent page automatically
        """
        self.client_secret_file = Path(client_secret_file)
        self.cache_file = Path(token_cache_file)
        self.open_browser = open_browser

    def _load_cache(self) -> Optional[Credentials]:
        """Load cached credentials from disk if they exist."""
        if not self.cache_file.exists():
            return None

        try:
            return Credentials.from_authorized_user_file(str(self.cache_file), self.SCOPES)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load token cache file %s: %s", self.cache_file, exc)
            return None

    def _save_cache(self, credentials: Credentials) -> None:
        """Save credentials to the token cache file."""
        try:
            self.cache_file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            with open(self.cache_file, "w", encoding="utf-8") as file_handle:
                file_handle.write(credentials.to_json())
            # Set restrictive permissions (owner only)
            self.cache_file.chmod(0o600)
        except OSError as exc:
            logger.warning("Could not save token cache to %s: %s", self.cache_file, exc)

    def get_credentials(self, force_refresh: bool = False) -> Credentials:
        """
        Get valid credentials, using the cache or requesting new ones.

        Args:
            force_refresh: Force authentication even if a cached token exists

        Returns:
            Authorized Google credentials

        Raises:
            AuthenticationError: If authentication fails
        """
        if not force_refresh:
            credentials = self._load_cache()

            if credentials and credentials.valid:
                return credentials

            if credentials and credentials.expired and credentials.refresh_token:
                try:
                    credentials.refresh(Request())
                except RefreshError as exc:
                    logger.info("Cached token could not be refreshed: %s", exc)
                except TransportError as exc:
                    raise AuthenticationError(f"Token refresh failed: {exc}") from exc
                else:
                    self._save_cache(credentials)
                    return credentials

        # Need to authenticate interactively
        return self._authenticate_installed_app_flow()

    def _authenticate_installed_app_flow(self) -> Credentials:
        """
        Perform the installed-app flow in the user's browser.

        Returns:
            Authorized credentials

        Raises:
            AuthenticationError: If authentication fails
        """
        if not self.client_secret_file.exists():
            raise AuthenticationError(
                f"Client secret file not found: {self.client_secret_file}\n"
                f"Download it from the Google Cloud console (OAuth client, desktop app)."
            )

        console.print("\n[bold cyan]🔐 Google Authentication Required[/bold cyan]")
        console.print("You need to sign in to access calendar information.\n")

        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                str(self.client_secret_file),
                scopes=self.SCOPES
            )
        except (OSError, ValueError) as exc:
            raise AuthenticationError(f"Unable to parse client secret file: {exc}") from exc

        console.print("[dim]Waiting for authorization in the browser...[/dim]\n")

        try:
            credentials = flow.run_local_server(
                port=0,
                open_browser=self.open_browser,
                authorization_prompt_message="Open this link in your browser: {url}"
            )
        except Exception as exc:  # pragma: no cover - oauthlib/browser failure
            raise AuthenticationError(f"Authentication failed: {exc}") from exc

        console.print("[bold green]✓ Authentication successful![/bold green]\n")

        console.print(f"[dim]Saving credential file to: {self.cache_file}[/dim]")
        self._save_cache(credentials)

        return credentials

    def clear_cache(self) -> None:
        """Clear the token cache (force re-authentication next time)."""
        if self.cache_file.exists():
            self.cache_file.unlink()
        console.print("[green]Token cache cleared. You will need to re-authenticate.[/green]")
