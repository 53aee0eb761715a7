"""Type- and name-driven synthesis of single column values."""

import json
import logging
import random
import re
import string
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
from faker import Faker

from .models import ColumnCategory, ColumnDescriptor, GenerationConfig


logger = logging.getLogger(__name__)


class _NoValue:
    """Marker for columns the caller must leave out of the insert."""

    def __repr__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _NoValue()


@dataclass(frozen=True)
class NameRule:
    """Maps column-name keywords to a value category."""
    category: str
    keywords: Tuple[str, ...]
    generator: str


# First match wins; first_name, last_name and company come before the generic "name"
# so that `company_name` is not read as a person
NAME_RULES: List[NameRule] = [
    NameRule("email", ("email",), "_generate_email"),
    NameRule("phone", ("phone",), "_generate_phone"),
    NameRule("first_name", ("first_name",), "_generate_first_name"),
    NameRule("last_name", ("last_name",), "_generate_last_name"),
    NameRule("company", ("company",), "_generate_company"),
    NameRule("person_name", ("name",), "_generate_person_name"),
    NameRule("street_address", ("address",), "_generate_street_address"),
    NameRule("city", ("city",), "_generate_city"),
    NameRule("country", ("country",), "_generate_country"),
    NameRule("job_title", ("title",), "_generate_job_title"),
    NameRule("description", ("description",), "_generate_description"),
    NameRule("url", ("url",), "_generate_url"),
]

FLAG_KEYWORDS = [
    'is_', 'has_', 'can_', 'should_', 'active', 'enabled', 'visible',
    'deleted', 'archived', 'published', 'verified', 'confirmed'
]

# Name rules only apply where a string value can be stored, so `name_count INT`
# still gets an integer
NAME_RULE_CATEGORIES = {ColumnCategory.TEXT, ColumnCategory.OTHER}

INTEGER_CEILINGS = {
    "smallint": 32767,
    "mediumint": 8388607,
}

SHORT_WORDS = ['test', 'data', 'demo', 'temp', 'prod', 'dev', 'user', 'app']


class ValueSynthesizer:
    """Produces one plausible value for a column."""

    def __init__(self, config: Optional[GenerationConfig] = None, faker: Optional[Faker] = None):
        self.config = config or GenerationConfig()
        self.faker = faker or Faker()

        # Set random seed for reproducibility
        if self.config.seed is not None:
            random.seed(self.config.seed)
            Faker.seed(self.config.seed)

        self._type_generators: Dict[ColumnCategory, Callable[[ColumnDescriptor], Any]] = {
            ColumnCategory.TEXT: self._generate_text,
            ColumnCategory.INTEGER: self._generate_integer,
            ColumnCategory.NARROW_INTEGER: self._generate_narrow_integer,
            ColumnCategory.DECIMAL: self._generate_decimal,
            ColumnCategory.DATE: self._generate_date,
            ColumnCategory.DATETIME: self._generate_datetime,
            ColumnCategory.TIME: self._generate_time,
            ColumnCategory.BOOLEAN: self._generate_boolean,
            ColumnCategory.JSON: self._generate_json,
            ColumnCategory.ENUM: self._generate_enum,
            ColumnCategory.UUID: self._generate_uuid,
            ColumnCategory.YEAR: self._generate_year,
            ColumnCategory.BIT: self._generate_bit,
        }

    def synthesize(self, column: ColumnDescriptor) -> Any:
        """Generate a value for a column, or NO_VALUE for auto-generated ones."""
        if column.is_auto_generated:
            return NO_VALUE

        if column.is_nullable and random.random() < self.config.null_probability:
            return None

        rule = self.classify_name(column) if column.category in NAME_RULE_CATEGORIES else None
        if rule is not None:
            logger.debug(f"Column {column.name} matched name rule {rule.category}")
            value = getattr(self, rule.generator)(column)
        else:
            generator = self._type_generators.get(column.category, self._generate_word)
            value = generator(column)

        return self._fit_length(column, value)

    def classify_name(self, column: ColumnDescriptor) -> Optional[NameRule]:
        """Return the first name rule whose keyword occurs in the column name."""
        column_name = column.name.lower()
        for rule in NAME_RULES:
            if any(keyword in column_name for keyword in rule.keywords):
                return rule
        return None

    # Name-based generators

    def _generate_email(self, column: ColumnDescriptor) -> str:
        return self.faker.email()

    def _generate_phone(self, column: ColumnDescriptor) -> str:
        if not column.max_length:
            return self.faker.phone_number()
        if column.max_length <= 10:
            return ''.join(str(random.randint(0, 9)) for _ in range(column.max_length))
        elif column.max_length <= 15:
            return f"({random.randint(100, 999)}){random.randint(100, 999)}-{random.randint(1000, 9999)}"
        return self.faker.phone_number()

    def _generate_first_name(self, column: ColumnDescriptor) -> str:
        return self.faker.first_name()

    def _generate_last_name(self, column: ColumnDescriptor) -> str:
        return self.faker.last_name()

    def _generate_company(self, column: ColumnDescriptor) -> str:
        return self.faker.company()

    def _generate_person_name(self, column: ColumnDescriptor) -> str:
        return self.faker.name()

    def _generate_street_address(self, column: ColumnDescriptor) -> str:
        return self.faker.street_address()

    def _generate_city(self, column: ColumnDescriptor) -> str:
        return self.faker.city()

    def _generate_country(self, column: ColumnDescriptor) -> str:
        return self.faker.country()

    def _generate_job_title(self, column: ColumnDescriptor) -> str:
        return self.faker.job()

    def _generate_description(self, column: ColumnDescriptor) -> str:
        return self.faker.paragraph()

    def _generate_url(self, column: ColumnDescriptor) -> str:
        return self.faker.url()

    # Type-based generators

    def _generate_text(self, column: ColumnDescriptor) -> str:
        """Generate text that fits the declared length."""
        max_length = column.max_length or self.config.default_text_length

        # Faker cannot produce text shorter than 5 characters
        if max_length < 5:
            if max_length <= 3:
                return ''.join(random.choices(string.ascii_lowercase, k=max_length))
            return random.choice([w for w in SHORT_WORDS if len(w) <= max_length])
        return self.faker.text(max_nb_chars=max_length)[:max_length]

    def _generate_integer(self, column: ColumnDescriptor) -> int:
        max_val = 1000000
        max_val = min(max_val, INTEGER_CEILINGS.get(column.data_type, max_val))
        if column.precision:
            max_val = min(max_val, 10 ** column.precision - 1)
        return random.randint(1, max(max_val, 1))

    def _generate_narrow_integer(self, column: ColumnDescriptor) -> int:
        if self._is_flag_column(column):
            return random.choice([0, 1])
        return random.randint(0, 127)

    def _is_flag_column(self, column: ColumnDescriptor) -> bool:
        """TINYINT(1) or a flag-like name marks a boolean stored as an integer."""
        if column.display_width == 1:
            return True
        column_name = column.name.lower()
        return any(pattern in column_name for pattern in FLAG_KEYWORDS)

    def _generate_decimal(self, column: ColumnDescriptor) -> float:
        scale = column.scale if column.scale is not None else 2
        places = min(scale, 2)
        max_val = 10000.0
        if column.precision:
            integer_digits = max(column.precision - scale, 0)
            max_val = min(max_val, float(10 ** integer_digits - 1))
        return round(random.uniform(0, max_val), places)

    def _generate_date(self, column: ColumnDescriptor) -> str:
        return self.faker.past_date(start_date="-1y").isoformat()

    def _generate_datetime(self, column: ColumnDescriptor) -> str:
        return self.faker.past_datetime(start_date="-1y").strftime("%Y-%m-%d %H:%M:%S")

    def _generate_time(self, column: ColumnDescriptor) -> str:
        return self.faker.time(pattern="%H:%M:%S")

    def _generate_boolean(self, column: ColumnDescriptor) -> bool:
        return random.choice([True, False])

    def _generate_json(self, column: ColumnDescriptor) -> str:
        return json.dumps({
            "id": self.faker.uuid4(),
            "value": self.faker.word(),
            "timestamp": self.faker.past_datetime(start_date="-30d").isoformat(),
        })

    def _generate_enum(self, column: ColumnDescriptor) -> str:
        if column.enum_values:
            return random.choice(column.enum_values)
        return self._generate_word(column)

    def _generate_uuid(self, column: ColumnDescriptor) -> str:
        return self.faker.uuid4()

    def _generate_year(self, column: ColumnDescriptor) -> int:
        return int(self.faker.year())

    def _generate_bit(self, column: ColumnDescriptor) -> int:
        # BIT(n) holds n bits; reflected as the column length
        width = min(column.max_length or 1, 16)
        return random.randint(0, 2 ** width - 1)

    def _generate_word(self, column: ColumnDescriptor) -> str:
        return self.faker.word()

    # Length handling

    def _fit_length(self, column: ColumnDescriptor, value: Any) -> Any:
        """Shorten string values to the declared maximum length."""
        if not isinstance(value, str) or not column.max_length or len(value) <= column.max_length:
            return value

        column_name = column.name.lower()
        if 'email' in column_name:
            value = self._truncate_email(value, column.max_length)
        elif 'phone' in column_name:
            value = self._truncate_phone_number(value, column.max_length)
        elif 'url' in column_name:
            value = self._truncate_url(value, column.max_length)

        # The format-aware helpers can still overshoot very small limits
        return value[:column.max_length]

    def _truncate_phone_number(self, phone: str, max_length: int) -> str:
        """Truncate phone number while keeping its most significant digits."""
        base_phone = re.sub(r'(x|ext)\d+$', '', phone)
        if len(base_phone) <= max_length:
            return base_phone

        digits_only = re.sub(r'[^\d]', '', phone)
        if len(digits_only) <= max_length:
            return digits_only

        return digits_only[-max_length:]

    def _truncate_email(self, email: str, max_length: int) -> str:
        """Truncate email while keeping a valid local@domain shape."""
        if '@' not in email:
            return email[:max_length]

        local, domain = email.split('@', 1)
        available_local = max_length - len(domain) - 1
        if available_local < 1:
            return f"u@{domain}"[:max_length]

        return f"{local[:available_local]}@{domain}"

    def _truncate_url(self, url: str, max_length: int) -> str:
        """Truncate URL down to scheme and host where possible."""
        if url.startswith(('http://', 'https://')):
            protocol = 'https://' if url.startswith('https://') else 'http://'
            remaining = url[len(protocol):]
        else:
            protocol = 'http://'
            remaining = url

        available = max_length - len(protocol)
        if available < 4:
            return url[:max_length]

        domain = remaining.split('/')[0]
        if len(domain) <= available:
            return f"{protocol}{domain}"

        return f"{protocol}{remaining[:available]}"
