import datetime as dt
import json
import unittest

from server.events import Event, make_event


class ServerEventsTests(unittest.TestCase):
    def test_make_event_serializes_timestamp_and_payload(self) -> None:
        now = dt.datetime(2026, 2, 21, 10, 0, tzinfo=dt.timezone.utc)
        event = make_event("sync_mode", now_fn=lambda: now, region="mode", view={"flow_mode": True})
        payload = json.loads(event.payload)

        self.assertEqual("sync_mode", event.topic)
        self.assertEqual("sync_mode", payload["type"])
        self.assertEqual(now.isoformat(), payload["timestamp"])
        self.assertEqual("mode", payload["region"])
        self.assertEqual({"flow_mode": True}, payload["view"])

    def test_event_payload_is_bytes_and_text_decodes(self) -> None:
        event = Event(topic="ping", payload="keepalive ✓".encode("utf-8"))

        self.assertIsInstance(event.payload, bytes)
        self.assertEqual("keepalive ✓", event.text())


if __name__ == "__main__":
    unittest.main()
