""" Cancellable one-shot timers. The countdown happens in a background
    thread, but the expiry callback is not invoked there: it is handed to a
    *schedule* callable, which the client uses to run the callback on its
    processing thread alongside inbound packets.
"""

import threading


class Timer:
    """ Invoke *callback* via *schedule* after *delay* seconds, unless the
        timer is cancelled first. Call :func:`start` to begin the countdown.
    """

    def __init__(self, delay, callback, schedule):

        self.delay = float(delay)
        self.callback = callback
        self.schedule = schedule
        self.cancelled = False
        self.fired = False

        self.alarm = threading.Event()
        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True


    def cancel(self):
        """ Prevent the callback from being invoked. Cancelling an expired
            or already cancelled timer has no effect.
        """

        self.cancelled = True
        self.alarm.set()


    def run(self):

        self.alarm.wait(self.delay)

        if self.cancelled == True:
            return

        self.schedule(self._expire)


    def start(self):
        self.thread.start()
        return self


    def _expire(self):

        # The cancellation may have arrived after the countdown completed,
        # but before the processing thread got around to this call.

        if self.cancelled == True:
            return

        self.fired = True
        self.callback()


# end of class Timer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
