import re
from urllib.parse import urlparse

from perbranch.constants import CONFIG_DIR
from perbranch.errors import MalformedUrlError
from perbranch.model import ParsedGitUrl

_SCP_RE = re.compile(r"^git@([^:/\s]+):(.+)$")

# names that would escape or shadow the <root>/<owner>/<repo> layout
_RESERVED_SEGMENTS = frozenset((".", "..", CONFIG_DIR))

# scheme -> reported protocol
_SCHEMES = {
    "http": "https",
    "https": "https",
    "git": "ssh",
}


def parse_git_url(url: str) -> ParsedGitUrl:
    """
    Parse a git remote URL into owner, repository and protocol.

    Examples:
        https://github.com/user/repo.git -> (user, repo, https)
        git@github.com:user/repo.git -> (user, repo, ssh)
        git://example.org/group/sub/project -> (sub, project, ssh)

    The owner is the path segment right before the repository name, so
    nested groups keep only their innermost segment.
    ``.``, ``..`` and the reserved config directory name are rejected as
    owner or repository because they would place the checkout outside its
    ``<root>/<owner>/<repo>`` slot.

    Args:
        url: Remote URL

    Returns:
        ParsedGitUrl

    Raises:
        MalformedUrlError: If the URL shape is unsupported or the owner or
            repository segment is missing
    """
    raw = url.strip()

    scp_match = _SCP_RE.match(raw)
    if scp_match:
        protocol = "ssh"
        path = scp_match.group(2)
    else:
        try:
            parsed = urlparse(raw)
        except ValueError as e:
            raise MalformedUrlError(url, e)
        protocol = _SCHEMES.get(parsed.scheme.lower())
        if protocol is None or not parsed.netloc:
            raise MalformedUrlError(url)
        path = parsed.path

    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:
        raise MalformedUrlError(url)

    owner = segments[-2]
    repo = segments[-1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo or {owner, repo} & _RESERVED_SEGMENTS:
        raise MalformedUrlError(url)

    return ParsedGitUrl(owner=owner, repo=repo, protocol=protocol, full_url=url)
