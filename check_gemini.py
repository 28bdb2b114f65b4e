"""
Quick setup check for the CIVIL SAVE Gemini integration
Run this before deploying to verify the key, report parsing and intel search.

Usage: python check_gemini.py
"""

import os
import sys
import tomllib

print("🧪 Checking CIVIL SAVE setup...\n")
print("=" * 60)

# 1. Check dependencies
print("\n📦 Step 1: Checking dependencies...")

try:
    from google import genai  # noqa: F401
    print("   ✅ google-genai installed")
except ImportError:
    print("   ❌ google-genai NOT installed")
    print("   Run: pip install google-genai")
    sys.exit(1)

try:
    import streamlit  # noqa: F401
    print("   ✅ streamlit installed")
except ImportError:
    print("   ❌ streamlit NOT installed")
    print("   Run: pip install streamlit")
    sys.exit(1)

print("\n   ✅ All dependencies installed!")

from gemini_service import GatewayError, create_client, extract_report, query_global_intel  # noqa: E402
from models import Coordinate  # noqa: E402

# 2. Check API key
print("\n🔑 Step 2: Checking API key...")

api_key = None

secrets_path = ".streamlit/secrets.toml"
if os.path.exists(secrets_path):
    print(f"   ✅ Found {secrets_path}")
    with open(secrets_path, 'rb') as f:
        api_key = tomllib.load(f).get('GEMINI_API_KEY')
    if api_key:
        print("   ✅ GEMINI_API_KEY found in secrets.toml")
    else:
        print("   ⚠️  GEMINI_API_KEY not found in secrets.toml")
else:
    print(f"   ⚠️  {secrets_path} not found")

if not api_key:
    api_key = os.getenv('GEMINI_API_KEY')
    if api_key:
        print("   ✅ GEMINI_API_KEY found in environment")
    else:
        print("   ❌ No API key found!")

if not api_key:
    print("\n   Please enter your Gemini API key:")
    print("   (Get it from: https://aistudio.google.com/app/apikey)")
    api_key = input("   API Key: ").strip()

if not api_key:
    print("\n   ❌ No API key provided. Cannot test AI features.")
    sys.exit(1)

if not api_key.startswith('AIza'):
    print("   ⚠️  Warning: API key should start with 'AIza...'")
    print(f"   Your key starts with: {api_key[:4]}...")

client = create_client(api_key)

# 3. Test report extraction
print("\n📡 Step 3: Testing report extraction...")

try:
    parsed = extract_report(client, "The water tank at Sector 4 is contaminated.")
    print(f"   ✅ Parsed: {parsed.name} | {parsed.type.value} | {parsed.status.value}")
    print(f"   Notes: {parsed.notes}")
except GatewayError as e:
    print(f"   ❌ Error: {e}")
    print("\n   Troubleshooting:")
    print("   - Check if API key is valid")
    print("   - Verify internet connection")
    print("   - Check that GEMINI_MODEL supports structured output")
    sys.exit(1)

# 4. Test grounded intel search
print("\n📶 Step 4: Testing global intel search...")

try:
    result = query_global_intel(client, "Where is the nearest hospital?",
                                observer=Coordinate(lat=40.7128, lon=-74.0060))
    print("   ✅ Intel search successful")
    print(f"   {result.text[:200]}...")
    print(f"   🔗 {len(result.links)} grounding link(s)")
    for link in result.links[:3]:
        print(f"      • {link.title}: {link.uri}")
except GatewayError as e:
    print(f"   ⚠️  Intel search failed: {e}")
    print("   (Maps grounding may not be enabled for this key/model)")

print("\n" + "=" * 60)
print("\n🚀 Next steps:")
print("   1. Run: streamlit run app.py")
print("   2. Allow location access on the GRID tab")
print("   3. Broadcast a test report and query INTEL")
print("=" * 60 + "\n")
