#!/usr/bin/env python3
"""
Basic example demonstrating the NeoEnigma cipher and obfuscation layers.

This example shows:
1. Building a configuration
2. Enciphering and deciphering text
3. Tracing the signal path of one letter
4. Obfuscating and deobfuscating a source snippet
5. Encrypting the configuration with a passphrase
"""

import sys
import os
import random

# Add the neoenigma package to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from neoenigma.machine.settings import EnigmaConfig
from neoenigma.machine.engine import create_machine
from neoenigma.machine.codec import encode_text, decode_text
from neoenigma.obfuscation.pipeline import obfuscate_source, deobfuscate_source
from neoenigma.crypto.aes_gcm import encrypt_config, decrypt_config
from neoenigma.crypto.kdf import generate_passphrase


def main():
    print("🔐 NeoEnigma - Python Implementation Demo")
    print("=" * 60)

    # 1. Configuration
    print("\n1. Building configuration...")
    config = EnigmaConfig.from_dict({
        "rotors": "I-II-III",
        "rotorStart": "MCK",
        "rings": "AAA",
        "plugboard": "AB CD EF",
        "reflector": "B",
    })
    print(f"   {config.to_json()}")

    # 2. Text codec
    print("\n2. Enciphering text...")
    message = "Hello from NeoEnigma! Digits 123 stay put."
    ciphertext = encode_text(message, config)
    print(f"   Original:   {message}")
    print(f"   Ciphertext: {ciphertext}")
    print(f"   Decoded:    {decode_text(ciphertext, config)}")
    print(f"   ✅ Round trip successful: {decode_text(ciphertext, config) == message}")

    # 3. Signal path
    print("\n3. Tracing one letter...")
    result = create_machine(config).encipher("A")
    print(f"   A -> {result.letter} via {result.path}")

    # 4. Obfuscation
    print("\n4. Obfuscating a snippet...")
    source = "const total = price + 5;\nconsole.log(total);"
    obfuscated = obfuscate_source(source, config, ".js", rng=random.Random(7))
    print("   Obfuscated:")
    for line in obfuscated.split("\n"):
        print(f"     {line}")
    print("   Deobfuscated:")
    for line in deobfuscate_source(obfuscated, config).split("\n"):
        print(f"     {line}")

    # 5. Configuration encryption
    print("\n5. Encrypting configuration...")
    passphrase = generate_passphrase()
    blob = encrypt_config(config.to_json(), passphrase)
    print(f"   Passphrase: {passphrase}")
    print(f"   Record: {blob[:60]}...")
    restored = EnigmaConfig.from_json(decrypt_config(blob, passphrase))
    print(f"   ✅ Configuration restored: {restored == config}")


if __name__ == "__main__":
    main()
