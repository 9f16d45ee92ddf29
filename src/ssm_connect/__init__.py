"""ssm-connect — open a shell or SSH tunnel to an EC2 instance by tag.

Thin wrapper around ``aws ec2 describe-instances`` and
``aws ssm start-session`` with a strict layered architecture.
"""

from ssm_connect.version import __version__

__all__: list[str] = ["__version__"]
