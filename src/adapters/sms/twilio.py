"""SMS delivery via the Twilio Messages REST API."""

import logging

import httpx

logger = logging.getLogger(__name__)

_TWILIO_API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class TwilioSmsSender:
    """
    Sends SMS through Twilio using HTTP basic auth (account SID + token).

    A client may be injected (tests pass one backed by httpx.MockTransport);
    otherwise a short-lived client is opened per message.
    """

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._timeout = timeout
        self._client = client

    def send(self, to: str, body: str) -> bool:
        """
        Send one SMS.

        Returns:
            True on a 2xx response, False on HTTP or transport failure (logged)
        """
        url = _TWILIO_API_URL.format(sid=self._account_sid)
        data = {"To": to, "From": self._from_number, "Body": body}

        try:
            if self._client is not None:
                resp = self._post(self._client, url, data)
            else:
                with httpx.Client() as client:
                    resp = self._post(client, url, data)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Twilio rejected SMS to %s: HTTP %s", to, exc.response.status_code)
            return False
        except httpx.HTTPError as exc:
            logger.error("SMS send to %s failed: %s", to, exc)
            return False
        return True

    def _post(self, client: httpx.Client, url: str, data: dict[str, str]) -> httpx.Response:
        return client.post(
            url,
            data=data,
            auth=(self._account_sid, self._auth_token),
            timeout=self._timeout,
        )
