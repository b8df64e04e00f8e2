from .activity_log import ActivityLog
from .complaint import Complaint, ComplaintComment, ComplaintCommentView
from .location import Location
from .mail import Mail
from .master_data import MasterData
from .setting import Setting
from .user import User
