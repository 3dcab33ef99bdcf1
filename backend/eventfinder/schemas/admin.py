from eventfinder.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_users: int
    total_events: int
    total_bookings: int
    total_revenue: float
    pending_events: int
