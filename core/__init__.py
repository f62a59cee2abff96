from .errors import SchedulerError, InvalidPoolError, EmptyPoolError, MissingKeyError
from .scheduler import Server, Scheduler
from .scheduler_impl import (
    SCHEDULERS,
    RoundRobinScheduler,
    WeightedRoundRobinScheduler,
    LeastConnectionsScheduler,
    LeastResponseTimeScheduler,
    IPHashScheduler,
    new_scheduler,
)
