from .quota import QuotaDefinition
from .organization import Organization, Space
from .app import App
from .process import Process
from .package import Package
from .build import Build
from .droplet import Droplet
from .revision import Revision
from .route_mapping import RouteMapping
from .sidecar import Sidecar
from .task import Task
from .usage_event import UsageEvent
