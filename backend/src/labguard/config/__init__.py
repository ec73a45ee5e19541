from labguard.config.surveillance import SurveillancePolicy, load_surveillance_policy

__all__ = ["SurveillancePolicy", "load_surveillance_policy"]
