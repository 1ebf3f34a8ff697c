from datetime import datetime, timezone


def log(level: str, event: str, **ctx):
    # ISO time (UTC) so every line sorts the same way
    ts = datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="seconds") + "Z"

    # "key=value" format (simple, readable, parseable)
    ctx_str = " ".join(f"{k}={repr(v)}" for k, v in ctx.items())

    if ctx_str:
        print(f"{ts} [{level}] {event} {ctx_str}", flush=True)
    else:
        print(f"{ts} [{level}] {event}", flush=True)

def log_info(event: str, **ctx): log("INFO", event, **ctx)
def log_warn(event: str, **ctx): log("WARN", event, **ctx)
def log_error(event: str, **ctx): log("ERROR", event, **ctx)
