import logging
import re

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("Campus_Chatbot")

# Patterns to mask
PATTERNS = {
    "EMAIL": (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b', '[EMAIL]'),
    "PHONE": (r'\+?\b\d{2,4}[-.\s]?\d{3,4}[-.\s]?\d{4}\b', '[PHONE]'),
    "IP": (r'\b\d{1,3}(?:\.\d{1,3}){3}\b', '[IP]'),
}

def anonymize_text(text: str) -> str:
    """Mask PII in text"""
    if not isinstance(text, str):
        return str(text)

    for name, (pattern, replacement) in PATTERNS.items():
        text = re.sub(pattern, replacement, text)
    return text

def log_audit(action: str, user: str, details: str = ""):
    """Log an audit event with anonymization"""
    user_masked = anonymize_text(user)
    details_masked = anonymize_text(details)
    logger.info(f"AUDIT | Action: {action} | User: {user_masked} | Details: {details_masked}")

def get_logger(name: str = None):
    if name:
        return logger.getChild(name)
    return logger
