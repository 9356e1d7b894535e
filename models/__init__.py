from .db import db
from .season import Season
from .schedule_template import ScheduleTemplate
from .slot import Slot
from .student import Student
from .attendance import Attendance
from .system_log import SystemLog
