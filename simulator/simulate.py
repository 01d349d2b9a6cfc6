import time, random, argparse, json, urllib.request
STATUSES = ["online", "online", "online", "warning", "offline"]
def request(api, path, method="GET", payload=None):
    data = json.dumps(payload).encode('utf-8') if payload is not None else None
    req = urllib.request.Request(api + path, data=data, method=method, headers={'Content-Type':'application/json'})
    with urllib.request.urlopen(req, timeout=10) as resp:
        return json.loads(resp.read().decode())
def main(argv=None):
    p = argparse.ArgumentParser(description="Randomly flip device statuses on a running device map API")
    p.add_argument('--api', default='http://localhost:8000')
    p.add_argument('--device', type=int, default=None, help="only update this device id")
    p.add_argument('--rate', type=float, default=2.0)
    args = p.parse_args(argv)
    ids = [args.device] if args.device is not None else [d["id"] for d in request(args.api, "/api/devices")]
    if not ids:
        p.exit(1, f"No devices found at {args.api}\n")
    print(f"Updating {len(ids)} device(s) on {args.api} every {args.rate}s... CTRL+C to stop")
    while True:
        device_id, status = random.choice(ids), random.choice(STATUSES)
        try:
            d = request(args.api, f"/api/devices/{device_id}/status", "PATCH", {"status": status})
            print("Updated", d["deviceId"], "->", d["status"])
        except Exception as e: print("Error:", e)
        time.sleep(args.rate)
if __name__ == "__main__": main()
