"""/proc parser: cwd symlinks listed by `find /proc/N/cwd ... -maxdepth 0 -printf '%p\\t%l\\n'`."""

import re
from typing import Dict

# /proc/1234/cwd<TAB>/home/alice/site
_CWD_LINK_RE = re.compile(r"^/proc/(\d+)/cwd\t(.+)$")


def parse_proc_cwd_links(stdout: str) -> Dict[int, str]:
    result: Dict[int, str] = {}
    for line in stdout.splitlines():
        m = _CWD_LINK_RE.match(line)
        if m:
            result[int(m.group(1))] = m.group(2)
    return result
