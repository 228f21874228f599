"""Browser-side reload scripts served at the script endpoint.

Both variants remember the first token they see and reload the page when a
later token differs. On errors they retry after a second; the polling
variant also forces one reload after an outage, since a restarted server
hands out a new token anyway.
"""

from __future__ import annotations

import json

RETRY_MS = 1000

_POLL_SCRIPT = """\
(function () {
  var lastUpdate = -1;
  var forceReload = false;

  var load = function () {
    var xobj = new XMLHttpRequest();
    xobj.overrideMimeType("application/json");
    xobj.open("GET", %(status_path)s, true);
    xobj.onreadystatechange = function () {
      if (xobj.readyState === XMLHttpRequest.DONE) {
        if (xobj.status !== 200) {
          forceReload = true;
          setTimeout(load, %(retry_ms)d);
        } else {
          var json = JSON.parse(xobj.responseText);
          if (lastUpdate === -1) {
            lastUpdate = json.uuid;
          }
          if (forceReload || lastUpdate !== json.uuid) {
            window.location.reload();
          } else {
            setTimeout(load, %(retry_ms)d);
          }
        }
      }
    };
    xobj.send(null);
  };

  load();
})();
"""

_SSE_SCRIPT = """\
(function () {
  var lastUpdate = -1;

  var load = function () {
    var source = new EventSource(%(status_path)s);

    source.addEventListener("reload", function (e) {
      var json = JSON.parse(e.data);
      if (lastUpdate === -1) {
        lastUpdate = json.uuid;
      }
      if (lastUpdate !== json.uuid) {
        window.location.reload();
      }
    }, false);

    source.onerror = function () {
      // some browsers stop retrying on their own
      source.close();
      setTimeout(load, %(retry_ms)d);
    };
  };

  load();
})();
"""


def render_script(status_path: str, stream: bool, retry_ms: int = RETRY_MS) -> str:
    """Render the client script for the given status endpoint.

    Args:
        status_path: URL path of the status endpoint.
        stream: True for the EventSource variant, False for XHR polling.
        retry_ms: Delay before reconnecting after an error.
    """
    template = _SSE_SCRIPT if stream else _POLL_SCRIPT
    return template % {"status_path": json.dumps(status_path), "retry_ms": retry_ms}
