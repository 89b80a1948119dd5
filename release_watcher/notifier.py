"""
Protocol definition for notification backends.

Defines the common interface that release sinks must implement.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Interface of the backends release messages are posted to."""

    async def test_connection(self) -> bool:
        """
        Test the connection to the notification backend.

        Returns
        -------
        bool
            True if the connection is working and messages can be sent.
        """
        ...

    async def send_message(self, payload: dict[str, Any]) -> None:
        """
        Deliver one message.

        Parameters
        ----------
        payload : dict[str, Any]
            JSON-serializable message built by ``Release.to_message``.

        Raises
        ------
        Exception
            Any delivery failure. Callers rely on this to stop posting.
        """
        ...

    async def close(self) -> None:
        """
        Close the notifier and release any resources.

        This method should be called when shutting down the application
        to cleanly close connections and free resources.
        """
        ...
