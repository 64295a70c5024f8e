from enum import Enum


class ErrorMessages(Enum):
    MESSAGE_0001 = "Ledger data could not be fetched. Please try again later."
    MESSAGE_0002 = "Account {account_id} was not found."
    MESSAGE_0003 = "Invalid date: {value}. Use YYYY-MM-DD."
    MESSAGE_0004 = "Unsupported export format: {value}."
    MESSAGE_0005 = "Invalid location: {value}."
