# src/simulation: WhatsApp Cloud API outbound simulator
