from weekgrid.models.arrangement import Arrangement, ArrangementKind, Generation  # noqa: F401
from weekgrid.models.operation_history import OperationHistory, OperationType  # noqa: F401
from weekgrid.models.schedule import Schedule  # noqa: F401
from weekgrid.models.semester import Semester  # noqa: F401
from weekgrid.models.task import Task, TaskPriority, TaskStatus, TaskType  # noqa: F401
from weekgrid.models.teacher import Teacher  # noqa: F401
from weekgrid.models.weekly_note import WeeklyNote  # noqa: F401
