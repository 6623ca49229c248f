import threading


class SharedState:
    """
    Locks shared by the Flask request threads (app.run(threaded=True)).

    lock:
        Serializes POST /puppet-data so two producers can't interleave a
        merge/record/average sequence on the frame store. The engine builds each
        output frame privately and publishes it with one assignment, so GET
        /puppet-data only takes the lock to grab the current reference.

            # Writer:
            with state.lock:
                engine.update(update)

            # Reader:
            with state.lock:
                frame = engine.output

    config_lock:
        Protects the PuppetConfig object. /api/config writes under it and
        POST /puppet-data snapshots config.smoothing under it, so an update
        never sees a half-applied config change.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self.config_lock = threading.Lock()
