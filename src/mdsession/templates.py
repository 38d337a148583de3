"""Canned document bodies for insert_template."""

from datetime import date
from typing import Optional

_README = """# Project Name

## Overview
A short description of the project.

## Installation
```bash
pip install project-name
```

## Usage
```python
# example code
```

## Contributing
Pull requests are welcome.

## License
MIT
"""

_BLOG = """# Post Title

> Published: {today}

## Summary
A short summary...

## Body
The main text...

## Conclusion
Closing thoughts...

---
Tags: #blog #tech
"""

_MEETING = """# Meeting Notes

**Date**: {today}
**Attendees**:
**Facilitator**:

## Agenda
1.
2.
3.

## Discussion

## Decisions

## Action Items
- [ ] Task 1
- [ ] Task 2

## Next Meeting
**Date**:
**Topics**:
"""

_API = """# API Reference

## Overview
Basic information about the API.

## Authentication
```
Authorization: Bearer <token>
```

## Endpoints

### GET /api/resource
List resources.

**Parameters**:
- `page` (number): page number
- `limit` (number): items per page

**Response**:
```json
{
  "data": [],
  "total": 0,
  "page": 1
}
```

## Error Codes
- 400: invalid request parameters
- 401: unauthorized
- 404: resource not found
- 500: server error
"""

TEMPLATES = {
    "readme": _README,
    "blog": _BLOG,
    "meeting": _MEETING,
    "api": _API,
}


def render_template(kind: str, today: Optional[date] = None) -> Optional[str]:
    """Return the body for a template kind, or None if the kind is unknown."""
    body = TEMPLATES.get(kind)
    if body is None:
        return None
    today = today or date.today()
    return body.replace("{today}", today.isoformat())
