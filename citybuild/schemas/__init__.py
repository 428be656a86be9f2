from citybuild.schemas.primitives import CamelModel, Money, NonNegInt, Percent, Rating, UtcDatetime
from citybuild.schemas.users import User
from citybuild.schemas.projects import PlanFile, Project
from citybuild.schemas.bids import Bid, BidWithContractor, ContractorSnapshot
from citybuild.schemas.notifications import Notification
from citybuild.schemas.commerce import InventoryItem, LoanApplication, Order, Payment
