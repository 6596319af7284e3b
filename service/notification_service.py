from fastapi import Request
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from typing import List, Optional
import html
import logging

logger = logging.getLogger(__name__)

SUBJECTS = {
    "NEW": "[NEW] {label} Request from {name}",
    "EDIT": "[EDITED] {label} Request from {name}",
    "APPROVED": "{label} Approved - {name}",
    "REJECTED": "{label} Rejected - {name}",
    "SPLIT": "{label} Updated by Manager - {name}",
}

STATUS_LABELS = {
    "NEW": "Pending Approval",
    "EDIT": "Updated - Pending Approval",
    "APPROVED": "Approved",
    "REJECTED": "Rejected",
    "SPLIT": "Partially Updated",
}


class LeaveNotifier:
    """
    Best-effort mail delivery for leave decisions, OTP codes and welcome mails.

    Delivery failures are logged and never raised: callers schedule these
    coroutines as background tasks after their own work has been committed.
    """

    def __init__(self, config: Optional[ConnectionConfig], recipients: Optional[List[str]] = None):
        self.mailer = FastMail(config) if config is not None else None
        self.recipients = recipients or []

    @property
    def is_available(self) -> bool:
        return self.mailer is not None

    async def _send(self, message: MessageSchema, kind: str):
        if not self.is_available:
            logger.info(f"Mail disabled, skipping {kind} email")
            return
        try:
            await self.mailer.send_message(message)
            logger.info(f"{kind} email sent to {len(message.recipients)} recipient(s)")
        except Exception as e:
            logger.error(f"Failed to send {kind} email: {str(e)}")

    async def send_leave_notification(
        self,
        mode: str,
        leave: dict,
        employee_name: str,
        employee_email: str,
        summary: Optional[str] = None,
    ):
        label = "Work From Home" if leave.get("type") == "WORK_FROM_HOME" else "Leave"
        subject = SUBJECTS[mode].format(label=label, name=employee_name)

        # managers hear about new and edited requests, the employee about decisions
        if mode in ("NEW", "EDIT"):
            recipients = self.recipients
        else:
            recipients = [employee_email]
        if not recipients:
            logger.warning(f"No recipients for {mode} leave notification")
            return

        name = html.escape(employee_name)
        email = html.escape(employee_email)
        times = ""
        if leave.get("start_time"):
            times = f"<p><b>Time:</b> {html.escape(leave['start_time'])} - {html.escape(leave.get('end_time') or '')}</p>"
        summary_html = f"<p><b>Changes:</b> {html.escape(summary)}</p>" if summary else ""
        comment_html = ""
        if leave.get("manager_comment"):
            comment_html = f"<p><b>Manager comment:</b> {html.escape(leave['manager_comment'])}</p>"

        body = f"""
        <div style="font-family: Arial, sans-serif; padding: 20px;">
            <h2>{html.escape(subject)}</h2>
            <p><b>Status:</b> {STATUS_LABELS[mode]}</p>
            <p><b>Employee:</b> {name} ({email})</p>
            <p><b>Type:</b> {leave.get('type')}</p>
            <p><b>Dates:</b> {leave.get('start_date')} to {leave.get('end_date')} ({leave.get('days')} day(s))</p>
            {times}
            <p><b>Reason:</b> {html.escape(leave.get('reason') or '')}</p>
            {summary_html}
            {comment_html}
        </div>
        """

        message = MessageSchema(
            subject=subject,
            recipients=recipients,
            body=body,
            subtype=MessageType.html,
        )
        await self._send(message, f"{mode} leave")

    async def send_otp(self, email: str, code: str):
        message = MessageSchema(
            subject="Your one-time login code",
            recipients=[email],
            body=f"""
            Hello,

            Your one-time code is {code}. It expires in 10 minutes.

            If you did not request this code, please ignore this email.
            """,
            subtype=MessageType.plain,
        )
        await self._send(message, "OTP")

    async def send_welcome(self, email: str, name: str, temp_password: str):
        message = MessageSchema(
            subject="Welcome to the Leave Tracker",
            recipients=[email],
            body=f"""
            Hello {name},

            An account has been created for you.

            Email: {email}
            Temporary password: {temp_password}

            Please sign in and change your password.
            """,
            subtype=MessageType.plain,
        )
        await self._send(message, "welcome")


def get_notifier(request: Request) -> LeaveNotifier:
    return request.app.state.notifier
