from .process import IProcessRepository
from .app import IAppRepository
from .quota import IQuotaRepository
from .usage_event import IUsageEventRepository
