from hr_admin.models.role import Role
from hr_admin.models.department import Department
from hr_admin.models.position import Position
from hr_admin.models.employee import Employee, EmploymentStatus
from hr_admin.models.user import User
from hr_admin.models.audit_log import AuditLog, AuditAction
