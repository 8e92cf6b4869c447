APP_NAME = "FinTrack"
APP_WIDTH = 1200
APP_HEIGHT = 750
LOGIN_WIDTH = 820
LOGIN_HEIGHT = 520

DEFAULT_API_URL = "http://localhost:5000/api/v1"
API_TIMEOUT_SECONDS = 30

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."
NETWORK_ERROR_MESSAGE = "Unable to connect to server. Please check your internet connection."

WORKSPACES = ("personal", "tuition")
TRANSACTION_TYPES = ["income", "expense", "transfer"]
TRANSACTIONS_PAGE_SIZE = 20

FREQUENCIES = ["monthly", "weekly", "yearly"]
RECURRING_STATUSES = ("active", "paused", "completed")

WALLET_TYPES = [
    {"value": "cash",        "label": "Cash",         "icon": "💵"},
    {"value": "bank",        "label": "Bank Account", "icon": "🏦"},
    {"value": "credit_card", "label": "Credit Card",  "icon": "💳"},
    {"value": "e_wallet",    "label": "E-Wallet",     "icon": "📱"},
    {"value": "other",       "label": "Other",        "icon": "💰"},
]

WALLET_COLORS = [
    "#6366f1", "#8b5cf6", "#ec4899", "#ef4444", "#f97316",
    "#eab308", "#22c55e", "#10b981", "#14b8a6", "#06b6d4",
    "#3b82f6", "#2563eb",
]

CURRENCIES = ["PKR", "USD", "EUR", "GBP", "INR", "AED", "SAR"]
CURRENCY_SYMBOLS = {"PKR": "Rs. ", "USD": "$", "EUR": "€", "GBP": "£", "INR": "₹"}

PAYMENT_METHODS = ["cash", "bank_transfer", "online", "cheque"]

STUDENT_CLASSES = [
    "Class 1", "Class 2", "Class 3", "Class 4", "Class 5", "Class 6",
    "Class 7", "Class 8", "Class 9", "Class 10", "O Level", "A Level",
]
STUDENT_SUBJECTS = [
    "Math", "Physics", "Chemistry", "Biology", "English", "Urdu",
    "Computer", "Science", "Pakistan Studies", "Islamiat",
]

AVATAR_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}
AVATAR_MAX_BYTES = 2 * 1024 * 1024

SEVERITY_COLORS = {
    "error":   "#F44336",
    "warning": "#FF9800",
    "info":    "#2196F3",
    "success": "#4CAF50",
}
