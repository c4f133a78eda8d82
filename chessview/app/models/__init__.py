from chessview.app.models.user import User
from chessview.app.models.resume import Resume
from chessview.app.models.interview import Interview, InterviewMessage
