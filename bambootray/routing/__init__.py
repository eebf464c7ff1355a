"""bambootray notification routing.

The ``NotificationDispatcher`` decides *whether* and *what* to notify for
each classified build event; sinks decide *how*.  Visual sinks show
toasts or balloons, spoken sinks synthesize speech.  Any number of sinks
may be registered per channel.
"""
