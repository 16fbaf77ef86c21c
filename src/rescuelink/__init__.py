"""RescueLink: emergency-response dispatch service.

Citizens and field users file alerts; dispatchers assign vehicles and
responders to them; alert and vehicle statuses are kept in step.

Run locally::

    uvicorn rescuelink.main:app --reload
"""

__version__ = "0.1.0"
