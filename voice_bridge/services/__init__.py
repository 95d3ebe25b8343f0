"""
Services module for the external collaborators of the bridge.

Key components:
- crm_client: Shared httpx client for the CRM web app's internal API.
- call_status: Call record adapter (``update-call``) that receives call
  lifecycle transitions, with a log-only fallback.
- scheduling: Calendar booking adapter (``book-meeting``) used by the
  book_meeting tool, with a fallback that reports booking as unavailable.

Usage examples:
```python
from voice_bridge.services.crm_client import CrmApiClient
from voice_bridge.services.call_status import HttpCallStatusSink
from voice_bridge.models.call_session import CallStatus, CallStatusUpdate

client = CrmApiClient("https://crm.example.com", secret="...")
sink = HttpCallStatusSink(client)
await sink.update_call_status("CA123", CallStatusUpdate(status=CallStatus.IN_PROGRESS))
await client.close()
```
"""
