"""Core session service — builds and dispatches the session request.

This service delegates the actual process launch to a
:class:`~ssm_connect.core.protocols.SessionLauncher` injected at
construction time.  It is responsible for:

* Building the immutable :class:`SessionRequest` for the chosen action.
* Delegating the ``start-session`` argv to the launcher.
* Turning a non-zero session status into :class:`DispatchError`.
"""

from __future__ import annotations

from ssm_connect.core.models import Action, Configuration, SessionRequest
from ssm_connect.core.protocols import SessionLauncher
from ssm_connect.exceptions import DispatchError
from ssm_connect.utils.constants import PORT_FORWARD_DOCUMENT, REMOTE_PORT


def build_session_request(config: Configuration, instance_id: str) -> SessionRequest:
    """Build the request for *instance_id* according to ``config.action``.

    Shell sessions carry no document or parameters.  Tunnels use the
    port-forwarding document with the remote port fixed to 22.

    Raises
    ------
    DispatchError
        If the action is neither shell nor tunnel.
    """
    if config.action is Action.SHELL:
        return SessionRequest(
            target=instance_id,
            region=config.region,
            profile=config.profile,
        )
    if config.action is Action.TUNNEL:
        return SessionRequest(
            target=instance_id,
            region=config.region,
            profile=config.profile,
            document_name=PORT_FORWARD_DOCUMENT,
            parameters={
                "portNumber": [str(REMOTE_PORT)],
                "localPortNumber": [str(config.local_port)],
            },
        )
    raise DispatchError(
        f"Unknown action: {config.action!r}",
        hint="Use -a ssh or -a tunnel.",
    )


class SessionService:
    """Stateless service that runs one session against one instance.

    Parameters
    ----------
    launcher:
        Any object satisfying the :class:`SessionLauncher` protocol.
    """

    def __init__(self, launcher: SessionLauncher) -> None:
        self._launcher: SessionLauncher = launcher

    def start(self, request: SessionRequest) -> None:
        """Run *request* and block until the session ends.

        Raises
        ------
        DispatchError
            When the session command exits with a non-zero status.  The
            status is carried in :attr:`DispatchError.exit_status`.
        """
        status = self._launcher.launch(request.command())
        if status != 0:
            raise DispatchError(
                f"Session to {request.target} exited with status {status}.",
                exit_status=status,
            )
